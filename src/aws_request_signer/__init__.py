# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""AWS Request Signer provides stand-alone SigV4 signing, including signed
aws-chunked S3 uploads, for use with HTTP tools such as AioHTTP, Curl, Requests,
urllib3, etc."""

from __future__ import annotations

from ._chunked import (
    AWSChunkedPayload,
    ChunkSigner,
    ChunkSignerState,
    framed_content_length,
)
from ._http import AWSRequest, Field, Fields, URI
from ._identity import AnonymousAWSCredentialIdentity, AWSCredentialIdentity
from ._io import AsyncBytesReader
from .signers import (
    S3_SIGV4_DEFAULTS,
    S3_SIGV4_QUERY_DEFAULTS,
    SIGV4_DEFAULTS,
    SIGV4_QUERY_DEFAULTS,
    SIGV4_SERVICE_DEFAULTS,
    AsyncSigV4Signer,
    CredentialScope,
    SignatureLocation,
    SigV4Signer,
    SigV4SignerConfig,
    SigV4SigningProperties,
    derive_signing_key,
)

__license__ = "Apache-2.0"
__version__ = "0.1.0"

__all__ = (
    "S3_SIGV4_DEFAULTS",
    "S3_SIGV4_QUERY_DEFAULTS",
    "SIGV4_DEFAULTS",
    "SIGV4_QUERY_DEFAULTS",
    "SIGV4_SERVICE_DEFAULTS",
    "URI",
    "AWSChunkedPayload",
    "AWSCredentialIdentity",
    "AWSRequest",
    "AnonymousAWSCredentialIdentity",
    "AsyncBytesReader",
    "AsyncSigV4Signer",
    "ChunkSigner",
    "ChunkSignerState",
    "CredentialScope",
    "Field",
    "Fields",
    "SigV4Signer",
    "SigV4SignerConfig",
    "SigV4SigningProperties",
    "SignatureLocation",
    "derive_signing_key",
    "framed_content_length",
)
