# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""The shape of the credentials accepted by the signers.

Any object with these attributes can be passed as ``identity``, so callers may
sign with credentials loaded by other libraries without converting them.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class Identity(Protocol):
    """Credentials that may stop being valid at a known point in time."""

    expiration: datetime | None = None
    """When the credentials stop being accepted, in UTC. None never expires."""

    @property
    def is_expired(self) -> bool:
        """Whether signing with these credentials would be rejected as expired."""
        if self.expiration is None:
            return False
        return datetime.now(tz=UTC) >= self.expiration


@runtime_checkable
class AWSCredentialsIdentity(Identity, Protocol):
    """An access key pair, optionally scoped to a temporary session."""

    access_key_id: str
    """Written into the credential scope of every signature."""

    secret_access_key: str
    """Seeds the signing key derivation. Never sent or logged."""

    session_token: str | None = None
    """Sent as ``X-Amz-Security-Token`` alongside the signature when set."""

    @property
    def is_anonymous(self) -> bool:
        """Whether requests made with this identity must be sent unsigned."""
        return False
