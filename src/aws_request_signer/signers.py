# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
import datetime
import hmac
import io
import logging
import warnings
from asyncio import iscoroutinefunction
from collections.abc import AsyncIterable, Callable, Iterable, Iterator, Sequence
from copy import deepcopy
from dataclasses import dataclass
from enum import Enum
from hashlib import sha256
from typing import Final, Required, TypedDict

from ._canonical import (
    CanonicalRequest,
    format_canonical_path,
    format_canonical_query,
    normalize_field_value,
)
from ._chunked import (
    DEFAULT_CHUNK_SIZE,
    EMPTY_SHA256_HASH,
    AWSChunkedPayload,
    ChunkSigner,
    framed_content_length,
)
from ._http import AWSRequest, Field, URI
from ._io import AsyncBytesReader
from .exceptions import (
    AWSSDKWarning,
    MissingExpectedParameterException,
    SigningConfigurationException,
    UnsupportedOperationException,
)
from .interfaces.identity import AWSCredentialsIdentity as _AWSCredentialsIdentity
from .interfaces.io import (
    AsyncByteStream,
    AsyncSeekable,
    ByteStream,
    Seekable,
    SeekableByteStream,
)

logger: Final = logging.getLogger(__name__)

HEADERS_EXCLUDED_FROM_SIGNING: tuple[str, ...] = (
    "accept",
    "accept-encoding",
    "authorization",
    "connection",
    "expect",
    "user-agent",
    "x-amzn-trace-id",
)
DEFAULT_PORTS: dict[str, int] = {"http": 80, "https": 443}

SIGV4_ALGORITHM: str = "AWS4-HMAC-SHA256"
SIGV4_TIMESTAMP_FORMAT: str = "%Y%m%dT%H%M%SZ"
UNSIGNED_PAYLOAD: str = "UNSIGNED-PAYLOAD"
STREAMING_SIGNED_PAYLOAD: str = "STREAMING-AWS4-HMAC-SHA256-PAYLOAD"
AWS_CHUNKED_ENCODING: str = "aws-chunked"
DEFAULT_EXPIRES: int = 3600
MAX_EXPIRES: int = 7 * 24 * 60 * 60

_READ_SIZE = 64 * 1024


class SignatureLocation(Enum):
    """Where a signer writes the signature and its companion values."""

    HEADER = "HEADER"
    """The ``Authorization`` header, with ``X-Amz-*`` companion headers."""

    QUERY_STRING = "QUERY_STRING"
    """``X-Amz-*`` query parameters, producing a presigned URL."""


class SigV4SigningProperties(TypedDict, total=False):
    region: Required[str]
    service: Required[str]
    date: str
    signing_clock: Callable[[], datetime.datetime]
    payload_signing_enabled: bool
    chunked_encoding_enabled: bool
    chunk_size: int
    content_checksum_enabled: bool
    uri_encode_path: bool
    normalize_path: bool
    expires: int


@dataclass(frozen=True, kw_only=True)
class SigV4SignerConfig:
    """Defaults a signer applies to the signing properties a caller leaves unset."""

    signature_location: SignatureLocation = SignatureLocation.HEADER

    payload_signing_enabled: bool = False
    """Hash the body into the signature. ``UNSIGNED-PAYLOAD`` is used otherwise."""

    chunked_encoding_enabled: bool = False
    """Send signed bodies as aws-chunked streams with per-chunk signatures."""

    chunk_size: int = DEFAULT_CHUNK_SIZE
    """The size in bytes of every aws-chunked data chunk except the last."""

    content_checksum_enabled: bool = False
    """Write the payload hash to the ``X-Amz-Content-SHA256`` header."""

    uri_encode_path: bool = False
    """Encode the already encoded path a second time.

    AWS services other than S3 verify signatures over the double encoded path.
    When disabled, the path is encoded in a single pass that keeps valid escapes.
    """

    normalize_path: bool = True
    """Remove dot segments and repeated slashes from the path before signing."""

    expires: int = DEFAULT_EXPIRES
    """Lifetime in seconds of a query string signature."""


SIGV4_DEFAULTS: Final = SigV4SignerConfig()
SIGV4_SERVICE_DEFAULTS: Final = SigV4SignerConfig(
    payload_signing_enabled=True,
    uri_encode_path=True,
)
S3_SIGV4_DEFAULTS: Final = SigV4SignerConfig(
    content_checksum_enabled=True,
    normalize_path=False,
)
SIGV4_QUERY_DEFAULTS: Final = SigV4SignerConfig(
    signature_location=SignatureLocation.QUERY_STRING,
)
S3_SIGV4_QUERY_DEFAULTS: Final = SigV4SignerConfig(
    signature_location=SignatureLocation.QUERY_STRING,
    normalize_path=False,
)


@dataclass(frozen=True, kw_only=True)
class CredentialScope:
    """Binds a signature to a date, region, and service."""

    date: str
    """The signing date, formatted as ``YYYYMMDD``."""

    region: str
    service: str
    terminator: str = "aws4_request"

    def __str__(self) -> str:
        # Scope format: <YYYYMMDD>/<AWS Region>/<AWS Service>/aws4_request
        return f"{self.date}/{self.region}/{self.service}/{self.terminator}"


def derive_signing_key(*, secret_key: str, scope: CredentialScope) -> bytes:
    """Derive the key that signs strings to sign within ``scope``.

    Components of Signing Key Calculation:
        DateKey              = HMAC-SHA256("AWS4"+"<SecretAccessKey>", "<YYYYMMDD>")
        DateRegionKey        = HMAC-SHA256(<DateKey>, "<aws-region>")
        DateRegionServiceKey = HMAC-SHA256(<DateRegionKey>, "<aws-service>")
        SigningKey           = HMAC-SHA256(<DateRegionServiceKey>, "aws4_request")
    """
    k_date = _hash(key=f"AWS4{secret_key}".encode(), value=scope.date)
    k_region = _hash(key=k_date, value=scope.region)
    k_service = _hash(key=k_region, value=scope.service)
    return _hash(key=k_service, value=scope.terminator)


def _hash(key: bytes, value: str) -> bytes:
    return hmac.new(key=key, msg=value.encode(), digestmod=sha256).digest()


@dataclass(frozen=True, kw_only=True)
class _SigningContext:
    """Signing properties merged with signer defaults and validated."""

    scope: CredentialScope
    timestamp: str
    signature_location: SignatureLocation
    payload_signing_enabled: bool
    chunked_encoding_enabled: bool
    chunk_size: int
    content_checksum_enabled: bool
    uri_encode_path: bool
    normalize_path: bool
    expires: int

    @property
    def uses_chunked_encoding(self) -> bool:
        # Chunk signatures only make sense when the payload is signed.
        return self.chunked_encoding_enabled and self.payload_signing_enabled

    @property
    def writes_headers(self) -> bool:
        return self.signature_location is SignatureLocation.HEADER


class SigV4Signer:
    """Request signer for applying the AWS Signature Version 4 algorithm."""

    def __init__(self, *, config: SigV4SignerConfig = SIGV4_DEFAULTS):
        """
        :param config: Defaults for signing properties not set per request. Use
            :py:data:`SIGV4_SERVICE_DEFAULTS` for AWS services that expect a signed
            payload and a double encoded path, or :py:data:`S3_SIGV4_DEFAULTS` to
            sign requests to Amazon S3.
        """
        self._config = config

    def sign(
        self,
        *,
        signing_properties: SigV4SigningProperties,
        request: AWSRequest,
        identity: _AWSCredentialsIdentity,
    ) -> AWSRequest:
        """Generate and apply a SigV4 Signature to a copy of the supplied request.

        Anonymous identities are not an error: the request is returned unchanged.

        :param signing_properties: SigV4SigningProperties to define signing primitives
            such as the target service, region, and date.
        :param request: An AWSRequest to sign prior to sending to the service.
        :param identity: A set of credentials representing an AWS Identity or role
            capacity.
        :returns: A signed copy of the request. In chunked mode its body yields the
            signed aws-chunked stream.
        """
        if _is_anonymous(identity):
            logger.debug("Skipping SigV4 signing for anonymous identity.")
            return request
        _validate_identity(identity)
        context = _resolve_context(
            signing_properties=signing_properties, config=self._config
        )

        new_request = _generate_new_request(request)
        decoded_length = None
        if context.uses_chunked_encoding:
            decoded_length = _decoded_content_length(new_request)
        _apply_required_fields(
            request=new_request,
            context=context,
            identity=identity,
            decoded_length=decoded_length,
        )

        payload_hash = self._compute_payload_hash(request=new_request, context=context)
        _apply_payload_hash_field(
            request=new_request, context=context, payload_hash=payload_hash
        )
        canonical_request = _build_canonical_request(
            request=new_request, context=context, payload_hash=payload_hash
        )
        string_to_sign = _string_to_sign(
            canonical_request=canonical_request.build(), context=context
        )
        signing_key = derive_signing_key(
            secret_key=identity.secret_access_key, scope=context.scope
        )
        signature = self.signature(
            string_to_sign=string_to_sign, signing_key=signing_key
        )
        _apply_signature(
            request=new_request,
            context=context,
            identity=identity,
            canonical_request=canonical_request,
            signature=signature,
        )

        if decoded_length is not None:
            new_request.body = AWSChunkedPayload(
                source=new_request.body,  # type: ignore - validated above
                chunk_signer=ChunkSigner(
                    signing_key=signing_key,
                    credential_scope=str(context.scope),
                    timestamp=context.timestamp,
                    seed_signature=signature,
                ),
                chunk_size=context.chunk_size,
                decoded_length=decoded_length,
            )
        return new_request

    def generate_authorization_field(
        self, *, credential: str, signed_headers: list[str], signature: str
    ) -> Field:
        """Generate the `Authorization` field.

        :param credential:
            Credential scope string for generating the Authorization header.
            Defined as:
                <access_key>/<date>/<region>/<service>/<request_type>
        :param signed_headers:
            A list of the field names used in signing.
        :param signature:
            Final hash of the SigV4 signing algorithm generated from the
            canonical request and string to sign.
        """
        return _authorization_field(
            credential=credential, signed_headers=signed_headers, signature=signature
        )

    def signing_key(
        self, *, secret_key: str, signing_properties: SigV4SigningProperties
    ) -> bytes:
        """Derive the signing key scoped to the date, region, and service of
        ``signing_properties``."""
        context = _resolve_context(
            signing_properties=signing_properties, config=self._config
        )
        return derive_signing_key(secret_key=secret_key, scope=context.scope)

    def signature(self, *, string_to_sign: str, signing_key: bytes) -> str:
        """Sign the string to sign with a key from :py:meth:`signing_key`."""
        return hmac.new(
            key=signing_key, msg=string_to_sign.encode(), digestmod=sha256
        ).hexdigest()

    def canonical_request(
        self, *, signing_properties: SigV4SigningProperties, request: AWSRequest
    ) -> str:
        """The canonical request is a standardized string laying out the components used
        in the SigV4 signing algorithm. This is useful to quickly compare inputs to find
        signature mismatches and unintended variances.

        The request is used as given: no signing fields are added to it, so it should
        already carry ``X-Amz-Date`` and any other fields that are to be signed.

        :param signing_properties:
            SigV4SigningProperties to define signing primitives such as
            the target service, region, and date.
        :param request:
            An AWSRequest to use for generating a SigV4 signature.
        """
        context = _resolve_context(
            signing_properties=signing_properties, config=self._config
        )
        payload_hash = self._compute_payload_hash(request=request, context=context)
        return _build_canonical_request(
            request=request, context=context, payload_hash=payload_hash
        ).build()

    def string_to_sign(
        self,
        *,
        canonical_request: str,
        signing_properties: SigV4SigningProperties,
    ) -> str:
        """The string to sign is the second step of our signing algorithm which
        concatenates the formal identifier of our signing algorithm, the signing
        DateTime, the scope of our credentials, and a hash of our previously generated
        canonical request. This is another checkpoint that can be used to ensure we're
        constructing our signature as intended.

        The SigV4 specification defines the string to sign as:
            Algorithm \\n
            RequestDateTime \\n
            CredentialScope  \\n
            HashedCanonicalRequest

        :param canonical_request:
            String generated from the `canonical_request` method.
        :param signing_properties:
            SigV4SigningProperties to define signing primitives such as
            the target service, region, and date.
        """
        if "date" not in signing_properties:
            raise MissingExpectedParameterException(
                "Cannot generate string_to_sign without a valid date "
                "in your signing_properties."
            )
        context = _resolve_context(
            signing_properties=signing_properties, config=self._config
        )
        return _string_to_sign(canonical_request=canonical_request, context=context)

    def _compute_payload_hash(
        self, *, request: AWSRequest, context: _SigningContext
    ) -> str:
        if (placeholder := _payload_hash_placeholder(context)) is not None:
            return placeholder

        body = request.body

        if body is None:
            return EMPTY_SHA256_HASH

        if isinstance(body, bytes | bytearray):
            _warn_payload_signing()
            return sha256(body).hexdigest()

        if _is_async_body(body):
            raise TypeError(
                "An async body was attached to a synchronous signer. Please use "
                "AsyncSigV4Signer for async AWSRequests or ensure your body is "
                "of type Iterable[bytes] or a readable file-like object."
            )
        if not isinstance(body, Iterable | ByteStream):
            raise TypeError(
                f"Unable to compute the payload hash of a {type(body).__name__} "
                "body. Please provide bytes, an Iterable[bytes] or a readable "
                "file-like object."
            )

        _warn_payload_signing()

        checksum = sha256()
        if isinstance(body, Seekable):
            position = body.tell()
            for chunk in _iter_body(body):
                checksum.update(chunk)
            body.seek(position)
        else:
            buffer = io.BytesIO()
            for chunk in _iter_body(body):
                buffer.write(chunk)
                checksum.update(chunk)
            buffer.seek(0)
            request.body = buffer
        return checksum.hexdigest()


class AsyncSigV4Signer:
    """Request signer for applying the AWS Signature Version 4 algorithm to requests
    with asynchronous bodies.

    Chunked encoding is not implemented for asynchronous bodies.
    """

    def __init__(self, *, config: SigV4SignerConfig = SIGV4_DEFAULTS):
        self._config = config
        self._signer = SigV4Signer(config=config)

    async def sign(
        self,
        *,
        signing_properties: SigV4SigningProperties,
        request: AWSRequest,
        identity: _AWSCredentialsIdentity,
    ) -> AWSRequest:
        """Generate and apply a SigV4 Signature to a copy of the supplied request.

        :param signing_properties: SigV4SigningProperties to define signing primitives
            such as the target service, region, and date.
        :param request: An AWSRequest to sign prior to sending to the service.
        :param identity: A set of credentials representing an AWS Identity or role
            capacity.
        :raises UnsupportedOperationException: If chunked encoding is in effect.
        """
        if _is_anonymous(identity):
            logger.debug("Skipping SigV4 signing for anonymous identity.")
            return request
        _validate_identity(identity)
        context = _resolve_context(
            signing_properties=signing_properties, config=self._config
        )
        if context.uses_chunked_encoding:
            raise UnsupportedOperationException(
                "AsyncSigV4Signer does not support chunked encoding. Use "
                "SigV4Signer with a synchronous body to send aws-chunked payloads."
            )

        new_request = _generate_new_request(request)
        _apply_required_fields(
            request=new_request, context=context, identity=identity, decoded_length=None
        )

        payload_hash = await self._compute_payload_hash(
            request=new_request, context=context
        )
        _apply_payload_hash_field(
            request=new_request, context=context, payload_hash=payload_hash
        )
        canonical_request = _build_canonical_request(
            request=new_request, context=context, payload_hash=payload_hash
        )
        string_to_sign = _string_to_sign(
            canonical_request=canonical_request.build(), context=context
        )
        signing_key = derive_signing_key(
            secret_key=identity.secret_access_key, scope=context.scope
        )
        signature = self._signer.signature(
            string_to_sign=string_to_sign, signing_key=signing_key
        )
        _apply_signature(
            request=new_request,
            context=context,
            identity=identity,
            canonical_request=canonical_request,
            signature=signature,
        )
        return new_request

    async def generate_authorization_field(
        self, *, credential: str, signed_headers: list[str], signature: str
    ) -> Field:
        """Generate the `Authorization` field.

        See :py:meth:`SigV4Signer.generate_authorization_field`.
        """
        return self._signer.generate_authorization_field(
            credential=credential, signed_headers=signed_headers, signature=signature
        )

    async def canonical_request(
        self, *, signing_properties: SigV4SigningProperties, request: AWSRequest
    ) -> str:
        """Build the canonical request of a request with an async body.

        See :py:meth:`SigV4Signer.canonical_request`.
        """
        context = _resolve_context(
            signing_properties=signing_properties, config=self._config
        )
        payload_hash = await self._compute_payload_hash(
            request=request, context=context
        )
        return _build_canonical_request(
            request=request, context=context, payload_hash=payload_hash
        ).build()

    async def string_to_sign(
        self,
        *,
        canonical_request: str,
        signing_properties: SigV4SigningProperties,
    ) -> str:
        """See :py:meth:`SigV4Signer.string_to_sign`."""
        return self._signer.string_to_sign(
            canonical_request=canonical_request, signing_properties=signing_properties
        )

    async def _compute_payload_hash(
        self, *, request: AWSRequest, context: _SigningContext
    ) -> str:
        if (placeholder := _payload_hash_placeholder(context)) is not None:
            return placeholder

        body = request.body

        if body is None:
            return EMPTY_SHA256_HASH

        if isinstance(body, bytes | bytearray):
            _warn_payload_signing()
            return sha256(body).hexdigest()

        if not (isinstance(body, AsyncIterable) or _is_async_body(body)):
            raise TypeError(
                "A sync body was attached to an asynchronous signer. Please use "
                "SigV4Signer for sync AWSRequests or ensure your body is "
                "of type AsyncIterable[bytes] or has an async read method."
            )
        _warn_payload_signing()

        chunks = body if isinstance(body, AsyncIterable) else AsyncBytesReader(body)

        checksum = sha256()
        if isinstance(body, AsyncSeekable) and iscoroutinefunction(body.seek):
            position = body.tell()
            async for chunk in chunks:
                checksum.update(chunk)
            await body.seek(position)
        else:
            buffer = io.BytesIO()
            async for chunk in chunks:
                buffer.write(chunk)
                checksum.update(chunk)
            buffer.seek(0)
            request.body = AsyncBytesReader(buffer)
        return checksum.hexdigest()


def _is_anonymous(identity: _AWSCredentialsIdentity) -> bool:
    return isinstance(identity, _AWSCredentialsIdentity) and identity.is_anonymous


def _validate_identity(identity: _AWSCredentialsIdentity) -> None:
    """Perform runtime and expiration checks before attempting signing."""
    if not isinstance(identity, _AWSCredentialsIdentity):  # pyright: ignore
        raise ValueError(
            "Received unexpected value for identity parameter. Expected "
            f"AWSCredentialIdentity but received {type(identity)}."
        )
    elif identity.is_expired:
        raise ValueError(
            f"Provided identity expired at {identity.expiration}. Please "
            "refresh the credentials or update the expiration parameter."
        )


def _resolve_context(
    *, signing_properties: SigV4SigningProperties, config: SigV4SignerConfig
) -> _SigningContext:
    # Read from the caller's mapping only; it is never mutated.
    for name in ("region", "service"):
        if not signing_properties.get(name):
            raise MissingExpectedParameterException(
                f"The signing property {name!r} is required for SigV4 signing, "
                f"but was not set. Found: {', '.join(signing_properties) or 'none'}."
            )

    chunk_size = signing_properties.get("chunk_size", config.chunk_size)
    if not _is_int(chunk_size) or chunk_size < 1:
        raise SigningConfigurationException(
            f"The signing property 'chunk_size' must be a positive integer, "
            f"but was {chunk_size!r}."
        )
    expires = signing_properties.get("expires", config.expires)
    if not _is_int(expires):
        raise SigningConfigurationException(
            f"The signing property 'expires' must be an integer, but was {expires!r}."
        )
    if not 1 <= expires <= MAX_EXPIRES:
        raise SigningConfigurationException(
            f"The signing property 'expires' must be between 1 and {MAX_EXPIRES} "
            f"seconds, but was {expires}."
        )

    if "date" in signing_properties:
        timestamp = signing_properties["date"]
    else:
        clock = signing_properties.get("signing_clock", _utc_now)
        timestamp = _format_timestamp(clock())

    context = _SigningContext(
        scope=CredentialScope(
            date=timestamp[0:8],
            region=signing_properties["region"],
            service=signing_properties["service"],
        ),
        timestamp=timestamp,
        signature_location=config.signature_location,
        payload_signing_enabled=signing_properties.get(
            "payload_signing_enabled", config.payload_signing_enabled
        ),
        chunked_encoding_enabled=signing_properties.get(
            "chunked_encoding_enabled", config.chunked_encoding_enabled
        ),
        chunk_size=chunk_size,
        content_checksum_enabled=signing_properties.get(
            "content_checksum_enabled", config.content_checksum_enabled
        ),
        uri_encode_path=signing_properties.get(
            "uri_encode_path", config.uri_encode_path
        ),
        normalize_path=signing_properties.get("normalize_path", config.normalize_path),
        expires=expires,
    )
    if context.uses_chunked_encoding and not context.writes_headers:
        raise UnsupportedOperationException(
            "Chunked encoding requires the signature to be sent in headers. It is "
            "not supported for query string signing."
        )
    return context


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


def _format_timestamp(instant: datetime.datetime) -> str:
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=datetime.UTC)
    return instant.astimezone(datetime.UTC).strftime(SIGV4_TIMESTAMP_FORMAT)


def _generate_new_request(request: AWSRequest) -> AWSRequest:
    new_request = deepcopy(request)
    if isinstance(new_request.body, bytes | bytearray):
        new_request.body = bytes(new_request.body)
    return new_request


def _apply_required_fields(
    *,
    request: AWSRequest,
    context: _SigningContext,
    identity: _AWSCredentialsIdentity,
    decoded_length: int | None,
) -> None:
    """Add the fields that must be signed before the canonical request is built."""
    if not context.writes_headers:
        params = [
            ("X-Amz-Algorithm", SIGV4_ALGORITHM),
            ("X-Amz-Credential", f"{identity.access_key_id}/{context.scope}"),
            ("X-Amz-Date", context.timestamp),
            ("X-Amz-Expires", str(context.expires)),
            ("X-Amz-SignedHeaders", ";".join(_normalize_signing_fields(request))),
        ]
        if identity.session_token is not None:
            params.append(("X-Amz-Security-Token", identity.session_token))
        request.destination = request.destination.with_query_params(params)
        return

    # Use `set_field` to overwrite any existing fields instead of `extend`
    # which appends to the existing values.
    request.fields.set_field(Field(name="X-Amz-Date", values=[context.timestamp]))
    if identity.session_token is not None:
        request.fields.set_field(
            Field(name="X-Amz-Security-Token", values=[identity.session_token])
        )
    else:
        request.fields.remove_field("X-Amz-Security-Token")

    if decoded_length is not None:
        encodings = [AWS_CHUNKED_ENCODING]
        if (existing := request.fields.get("Content-Encoding")) is not None:
            encodings.extend(v for v in existing.values if v != AWS_CHUNKED_ENCODING)
        request.fields.set_field(Field(name="Content-Encoding", values=encodings))
        request.fields.set_field(
            Field(
                name="Content-Length",
                values=[str(framed_content_length(decoded_length, context.chunk_size))],
            )
        )
        request.fields.set_field(
            Field(name="X-Amz-Decoded-Content-Length", values=[str(decoded_length)])
        )


def _apply_payload_hash_field(
    *, request: AWSRequest, context: _SigningContext, payload_hash: str
) -> None:
    if not context.writes_headers:
        return
    if context.content_checksum_enabled or context.uses_chunked_encoding:
        request.fields.set_field(
            Field(name="X-Amz-Content-SHA256", values=[payload_hash])
        )


def _decoded_content_length(request: AWSRequest) -> int:
    """Find the length of the payload before aws-chunked framing."""
    body = request.body
    if _is_async_body(body):
        raise TypeError(
            "An async body was attached to a synchronous signer. Chunked encoding "
            "requires a body of type Iterable[bytes] or a readable file-like object."
        )
    if (content_length := request.fields.get("Content-Length")) is not None:
        try:
            decoded_length = int(content_length.as_string())
        except ValueError:
            raise SigningConfigurationException(
                "Chunked encoding requires an integer Content-Length, but found "
                f"{content_length.as_string()!r}."
            ) from None
        if decoded_length < 0:
            raise SigningConfigurationException(
                f"Content-Length must not be negative, but found {decoded_length}."
            )
        return decoded_length
    if body is None:
        return 0
    if isinstance(body, bytes | bytearray):
        return len(body)
    if isinstance(body, SeekableByteStream):
        position = body.tell()
        end = body.seek(0, io.SEEK_END)
        body.seek(position)
        return end - position
    if isinstance(body, Sequence):
        return sum(len(part) for part in body)
    raise MissingExpectedParameterException(
        "Chunked encoding requires a known payload length. Set the Content-Length "
        "field or use a seekable body."
    )


def _is_async_body(body: object) -> bool:
    if isinstance(body, AsyncByteStream) and iscoroutinefunction(body.read):
        return True
    return isinstance(body, AsyncIterable) and not isinstance(body, Iterable)


def _payload_hash_placeholder(context: _SigningContext) -> str | None:
    if not context.payload_signing_enabled:
        return UNSIGNED_PAYLOAD
    if context.uses_chunked_encoding:
        return STREAMING_SIGNED_PAYLOAD
    return None


def _build_canonical_request(
    *, request: AWSRequest, context: _SigningContext, payload_hash: str
) -> CanonicalRequest:
    return CanonicalRequest(
        method=request.method.upper(),
        uri=format_canonical_path(
            request.destination.path,
            uri_encode_path=context.uri_encode_path,
            normalize_path=context.normalize_path,
        ),
        query=format_canonical_query(request.destination.query),
        fields=tuple(_normalize_signing_fields(request).items()),
        payload_hash=payload_hash,
    )


def _normalize_signing_fields(request: AWSRequest) -> dict[str, str]:
    normalized_fields = {
        field.name.lower(): ",".join(normalize_field_value(v) for v in field.values)
        for field in request.fields
        if _is_signable_header(field.name.lower())
    }
    if "host" not in normalized_fields:
        normalized_fields["host"] = _normalize_host_field(uri=request.destination)

    return dict(sorted(normalized_fields.items()))


def _is_signable_header(field_name: str) -> bool:
    return field_name not in HEADERS_EXCLUDED_FROM_SIGNING


def _normalize_host_field(*, uri: URI) -> str:
    if uri.port is not None and DEFAULT_PORTS.get(uri.scheme) == uri.port:
        return uri.host
    return uri.netloc


def _string_to_sign(*, canonical_request: str, context: _SigningContext) -> str:
    string_to_sign = (
        f"{SIGV4_ALGORITHM}\n"
        f"{context.timestamp}\n"
        f"{context.scope}\n"
        f"{sha256(canonical_request.encode()).hexdigest()}"
    )
    logger.debug("String to sign:\n%s", string_to_sign)
    return string_to_sign


def _apply_signature(
    *,
    request: AWSRequest,
    context: _SigningContext,
    identity: _AWSCredentialsIdentity,
    canonical_request: CanonicalRequest,
    signature: str,
) -> None:
    credential = f"{identity.access_key_id}/{context.scope}"
    logger.debug("Signed headers: %s", canonical_request.signed_headers)
    if context.writes_headers:
        request.fields.set_field(
            _authorization_field(
                credential=credential,
                signed_headers=[name for name, _ in canonical_request.fields],
                signature=signature,
            )
        )
    else:
        request.destination = request.destination.with_query_params(
            [("X-Amz-Signature", signature)]
        )


def _authorization_field(
    *, credential: str, signed_headers: list[str], signature: str
) -> Field:
    signed_headers_str = ";".join(signed_headers)
    auth_str = (
        f"{SIGV4_ALGORITHM} Credential={credential}, "
        f"SignedHeaders={signed_headers_str}, Signature={signature}"
    )
    return Field(name="Authorization", values=[auth_str])


def _iter_body(body: Iterable[bytes] | ByteStream) -> Iterator[bytes]:
    if isinstance(body, ByteStream):
        return iter(lambda: body.read(_READ_SIZE), b"")
    return iter(body)


def _warn_payload_signing() -> None:
    warnings.warn(
        "Payload signing is enabled. This may result in "
        "decreased performance for large request bodies.",
        AWSSDKWarning,
        stacklevel=3,
    )
