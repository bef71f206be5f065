# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
from asyncio import iscoroutinefunction
from collections.abc import AsyncIterable, AsyncIterator, Iterable
from io import BytesIO
from typing import Self, TypeAlias

from .interfaces.io import AsyncByteStream, AsyncPayload, ByteStream

_AsyncReadable: TypeAlias = (
    AsyncByteStream | ByteStream | AsyncIterable[bytes] | Iterable[bytes] | bytes
)

# The default chunk size for iterating streams.
_DEFAULT_CHUNK_SIZE = 1024


class AsyncBytesReader:
    """A file-like object that reads from an underlying stream asynchronously."""

    def __init__(self, data: _AsyncReadable):
        """Initializes self.

        Data is read from the source on an as-needed basis and is not buffered.

        :param data: The source data to read from.
        """
        self._remainder = b""
        if isinstance(data, bytes | bytearray):
            self._data: AsyncPayload | None = _AsyncIOWrapper(BytesIO(data))
        elif isinstance(data, AsyncByteStream) and iscoroutinefunction(data.read):
            self._data = data
        elif isinstance(data, ByteStream):
            self._data = _AsyncIOWrapper(data)
        elif isinstance(data, AsyncIterable):
            self._data = data
        else:
            self._data = _AsyncIterableWrapper(data)

        self._closed = False

    async def read(self, size: int = -1) -> bytes:
        """Read a number of bytes from the stream.

        :param size: The maximum number of bytes to read. If less than 0, all bytes
            will be read.
        """
        if self._closed or not self._data:
            raise ValueError("I/O operation on closed file.")

        if isinstance(self._data, AsyncByteStream):
            return await self._data.read(size)

        return await self._read_from_iterable(
            self._data,  # type: ignore
            size,
        )

    async def _read_from_iterable(
        self, iterable: AsyncIterable[bytes], size: int
    ) -> bytes:
        result = self._remainder
        if size < 0:
            async for element in iterable:
                result += element
            self._remainder = b""
            return result

        if len(result) < size:
            async for element in iterable:
                result += element
                if len(result) >= size:
                    break

        self._remainder = result[size:]
        return result[:size]

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._chunk_iter()

    async def _chunk_iter(self) -> AsyncIterator[bytes]:
        while True:
            chunk = await self.read(_DEFAULT_CHUNK_SIZE)
            if not chunk:
                break
            yield chunk

    async def close(self) -> None:
        """Closes the stream, as well as the underlying stream where possible."""
        if (close := getattr(self._data, "close", None)) is not None:
            if iscoroutinefunction(close):
                await close()
            else:
                close()

        self._data = None
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()


class _AsyncIOWrapper:
    """Exposes a synchronous file-like object through an async read method."""

    def __init__(self, data: ByteStream):
        self._data = data

    async def read(self, size: int = -1) -> bytes:
        return self._data.read(size)

    def close(self) -> None:
        if (close := getattr(self._data, "close", None)) is not None:
            close()


class _AsyncIterableWrapper:
    """Exposes a synchronous byte iterable as an async byte iterable."""

    def __init__(self, data: Iterable[bytes]):
        self._data = iter(data)

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._chunk_iter()

    async def _chunk_iter(self) -> AsyncIterator[bytes]:
        for chunk in self._data:
            yield chunk
