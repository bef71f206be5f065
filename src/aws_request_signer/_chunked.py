# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""Signing of request bodies sent with ``Content-Encoding: aws-chunked``.

Each chunk of the body is framed as::

    <hex-length>;chunk-signature=<signature>\\r\\n<data>\\r\\n

and the stream ends with a zero-length chunk. Every chunk signature covers the
signature of the chunk before it, seeded with the signature of the request itself,
so chunks can only be produced one at a time and in order.
"""

import hmac
import logging
from collections.abc import Iterator
from enum import Enum
from hashlib import sha256
from io import BytesIO
from typing import Final

from .interfaces.io import ByteStream, ChunkSource

logger: Final = logging.getLogger(__name__)

STREAMING_PAYLOAD_ALGORITHM: Final = "AWS4-HMAC-SHA256-PAYLOAD"
EMPTY_SHA256_HASH: Final = (
    "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
)
DEFAULT_CHUNK_SIZE: Final = 64 * 1024

_SIGNATURE_EXTENSION = ";chunk-signature="
_SIGNATURE_LENGTH = 64
_CRLF = b"\r\n"


class ChunkSignerState(Enum):
    READY = "READY"
    """No chunk has been signed yet."""

    SIGNING = "SIGNING"
    """At least one data chunk has been signed."""

    TERMINAL = "TERMINAL"
    """The zero-length chunk has been signed. No more chunks may follow."""


class ChunkSigner:
    """Signs and frames the chunks of one aws-chunked body, in order.

    The signer holds the chain state explicitly so it can be driven by any reader,
    synchronous or not. It must not be shared between concurrent readers.
    """

    def __init__(
        self,
        *,
        signing_key: bytes,
        credential_scope: str,
        timestamp: str,
        seed_signature: str,
    ):
        """
        :param signing_key: The key that produced ``seed_signature``.
        :param credential_scope: ``<date>/<region>/<service>/aws4_request``.
        :param timestamp: The ``X-Amz-Date`` value of the request.
        :param seed_signature: The hex signature of the request itself.
        """
        self._signing_key = signing_key
        self._credential_scope = credential_scope
        self._timestamp = timestamp
        self._previous_signature = seed_signature
        self._state = ChunkSignerState.READY
        self._chunks_signed = 0

    @property
    def state(self) -> ChunkSignerState:
        return self._state

    @property
    def previous_signature(self) -> str:
        return self._previous_signature

    def string_to_sign(self, chunk: bytes) -> str:
        """The chunk string to sign is defined as:
            AWS4-HMAC-SHA256-PAYLOAD\\n
            <Timestamp>\\n
            <CredentialScope>\\n
            <PreviousSignature>\\n
            <HashOfEmptyString>\\n
            <HashOfChunkData>
        """
        return (
            f"{STREAMING_PAYLOAD_ALGORITHM}\n"
            f"{self._timestamp}\n"
            f"{self._credential_scope}\n"
            f"{self._previous_signature}\n"
            f"{EMPTY_SHA256_HASH}\n"
            f"{sha256(chunk).hexdigest()}"
        )

    def sign_chunk(self, chunk: bytes) -> bytes:
        """Sign ``chunk`` and return its framed bytes.

        An empty ``chunk`` is the terminal chunk; its frame ends the stream.
        """
        if self._state is ChunkSignerState.TERMINAL:
            raise ValueError("Cannot sign a chunk after the terminal chunk.")

        string_to_sign = self.string_to_sign(chunk)
        signature = hmac.new(
            self._signing_key, string_to_sign.encode("utf-8"), sha256
        ).hexdigest()
        frame = b"".join(
            (
                f"{len(chunk):x}{_SIGNATURE_EXTENSION}{signature}".encode("ascii"),
                _CRLF,
                chunk,
                _CRLF,
            )
        )

        self._previous_signature = signature
        self._chunks_signed += 1
        if chunk:
            self._state = ChunkSignerState.SIGNING
            logger.debug(
                "Signed chunk %s of %s bytes.", self._chunks_signed, len(chunk)
            )
        else:
            self._state = ChunkSignerState.TERMINAL
            logger.debug("Signed terminal chunk after %s chunks.", self._chunks_signed)
        return frame


def framed_content_length(decoded_length: int, chunk_size: int) -> int:
    """Get the number of bytes an aws-chunked body takes on the wire.

    :param decoded_length: The length of the payload before framing.
    :param chunk_size: The size of every data chunk except possibly the last.
    """
    full_chunks, remainder = divmod(decoded_length, chunk_size)
    length = full_chunks * _frame_length(chunk_size)
    if remainder:
        length += _frame_length(remainder)
    return length + _frame_length(0)


def _frame_length(chunk_length: int) -> int:
    return (
        len(f"{chunk_length:x}")
        + len(_SIGNATURE_EXTENSION)
        + _SIGNATURE_LENGTH
        + len(_CRLF)
        + chunk_length
        + len(_CRLF)
    )


class AWSChunkedPayload:
    """A request body that yields the signed aws-chunked framing of a payload.

    The payload is read lazily, one chunk at a time. It can be consumed either by
    iteration, which yields one frame at a time, or through ``read``. Only one
    consumer may read from an instance.
    """

    def __init__(
        self,
        *,
        source: ChunkSource | bytes | None,
        chunk_signer: ChunkSigner,
        chunk_size: int,
        decoded_length: int,
    ):
        if source is None:
            source = b""
        if isinstance(source, bytes | bytearray):
            source = BytesIO(source)
        self._chunks = _ChunkReader(source, chunk_size)
        self._chunk_signer = chunk_signer
        self._decoded_length = decoded_length
        self._content_length = framed_content_length(decoded_length, chunk_size)
        self._bytes_read = 0
        self._buffer = b""

    @property
    def content_length(self) -> int:
        """The total number of framed bytes this payload produces."""
        return self._content_length

    @property
    def decoded_content_length(self) -> int:
        return self._decoded_length

    def __iter__(self) -> Iterator[bytes]:
        if self._buffer:
            buffered, self._buffer = self._buffer, b""
            yield buffered
        while (frame := self._next_frame()) is not None:
            yield frame

    def read(self, size: int | None = -1, /) -> bytes:
        if size is None or size < 0:
            return b"".join(self)

        while len(self._buffer) < size:
            frame = self._next_frame()
            if frame is None:
                break
            self._buffer += frame
        result, self._buffer = self._buffer[:size], self._buffer[size:]
        return result

    def _next_frame(self) -> bytes | None:
        if self._chunk_signer.state is ChunkSignerState.TERMINAL:
            return None

        # A chunk is only framed once it has been read in full, so a failing
        # source never leaves a partial frame behind.
        chunk = self._chunks.read_chunk()
        self._bytes_read += len(chunk)
        if not chunk and self._bytes_read != self._decoded_length:
            raise ValueError(
                f"Expected a payload of {self._decoded_length} bytes for "
                f"aws-chunked encoding, but read {self._bytes_read} bytes."
            )
        if self._bytes_read > self._decoded_length:
            raise ValueError(
                f"Expected a payload of {self._decoded_length} bytes for "
                f"aws-chunked encoding, but read at least {self._bytes_read} bytes."
            )
        return self._chunk_signer.sign_chunk(chunk)


class _ChunkReader:
    """Re-slices a byte source into chunks of exactly ``chunk_size`` bytes.

    Only the final chunk may be shorter. An empty chunk means the source is
    exhausted.
    """

    def __init__(self, source: ChunkSource, chunk_size: int):
        self._chunk_size = chunk_size
        self._buffer = bytearray()
        self._exhausted = False
        if isinstance(source, ByteStream):
            self._pieces: Iterator[bytes] = iter(
                lambda: source.read(chunk_size), b""
            )
        else:
            self._pieces = iter(source)

    def read_chunk(self) -> bytes:
        while not self._exhausted and len(self._buffer) < self._chunk_size:
            try:
                self._buffer += next(self._pieces)
            except StopIteration:
                self._exhausted = True
        chunk = bytes(self._buffer[: self._chunk_size])
        del self._buffer[: self._chunk_size]
        return chunk
