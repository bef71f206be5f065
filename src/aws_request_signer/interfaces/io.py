# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""Structural types for the request bodies the signers can hash and frame."""

from collections.abc import AsyncIterable, Iterable
from typing import Protocol, TypeAlias, runtime_checkable


@runtime_checkable
class ByteStream(Protocol):
    """A readable payload source, such as an open file or a BytesIO."""

    def read(self, size: int | None = -1, /) -> bytes: ...


@runtime_checkable
class AsyncByteStream(Protocol):
    """A payload source whose read must be awaited."""

    async def read(self, size: int | None = -1, /) -> bytes: ...


@runtime_checkable
class Seekable(Protocol):
    """A payload source that can be rewound after its hash is computed."""

    def seek(self, offset: int, whence: int = 0, /) -> int: ...

    def tell(self) -> int: ...


@runtime_checkable
class AsyncSeekable(Protocol):
    """An async payload source that can be rewound after its hash is computed."""

    async def seek(self, offset: int, whence: int = 0, /) -> int: ...

    def tell(self) -> int: ...


@runtime_checkable
class SeekableByteStream(ByteStream, Seekable, Protocol):
    """A readable payload source whose remaining length can be measured."""


ChunkSource: TypeAlias = ByteStream | Iterable[bytes]
"""Where the plain bytes of an aws-chunked upload are read from."""

AsyncPayload: TypeAlias = AsyncByteStream | AsyncIterable[bytes]
"""A body that can only be consumed by the async signer."""
