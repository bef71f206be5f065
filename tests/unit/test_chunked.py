#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from io import BytesIO

import pytest
from aws_request_signer import (
    AWSChunkedPayload,
    ChunkSigner,
    ChunkSignerState,
    CredentialScope,
    derive_signing_key,
    framed_content_length,
)

SCOPE = CredentialScope(date="20130524", region="us-east-1", service="s3")
TIMESTAMP = "20130524T000000Z"
SIGNING_KEY = derive_signing_key(
    secret_key="wJalrXUtnFEMI/K7MDENG/bPxRfiCYEXAMPLEKEY", scope=SCOPE
)
SEED_SIGNATURE = "4f232c4386841ef735655705268965c44a0e4690baa4adea153f7db9fa80a0a9"


def new_chunk_signer() -> ChunkSigner:
    return ChunkSigner(
        signing_key=SIGNING_KEY,
        credential_scope=str(SCOPE),
        timestamp=TIMESTAMP,
        seed_signature=SEED_SIGNATURE,
    )


def parse_frames(body: bytes) -> list[tuple[int, str, bytes]]:
    frames: list[tuple[int, str, bytes]] = []
    while body:
        header, body = body.split(b"\r\n", 1)
        size_hex, signature = header.decode("ascii").split(";chunk-signature=")
        size = int(size_hex, 16)
        data, trailer, body = body[:size], body[size : size + 2], body[size + 2 :]
        assert trailer == b"\r\n"
        frames.append((size, signature, data))
    return frames


def test_chunk_signatures_chain_from_seed() -> None:
    signer = new_chunk_signer()
    first = signer.sign_chunk(b"a" * 65536)
    second = signer.sign_chunk(b"a" * 1024)
    final = signer.sign_chunk(b"")

    assert first.startswith(
        b"10000;chunk-signature="
        b"ad80c730a21e5b8d04586a2213dd63b9a0e99e0e2307b0ade35a65485a288648\r\n"
    )
    assert second.startswith(
        b"400;chunk-signature="
        b"0055627c9e194cb4542bae2aa5492e3c1575bbb81b612b7d234b86a503ef5497\r\n"
    )
    assert final == (
        b"0;chunk-signature="
        b"b6c6ea8a5354eaf15b3cb7646744f4275b71ea724fed81ceb9323e279d449df9\r\n\r\n"
    )


def test_chunk_string_to_sign() -> None:
    signer = new_chunk_signer()
    assert signer.string_to_sign(b"") == (
        "AWS4-HMAC-SHA256-PAYLOAD\n"
        "20130524T000000Z\n"
        "20130524/us-east-1/s3/aws4_request\n"
        f"{SEED_SIGNATURE}\n"
        "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855\n"
        "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    )


def test_chunk_signer_state() -> None:
    signer = new_chunk_signer()
    assert signer.state is ChunkSignerState.READY
    assert signer.previous_signature == SEED_SIGNATURE

    frame = signer.sign_chunk(b"data")
    assert signer.state is ChunkSignerState.SIGNING
    assert signer.previous_signature == parse_frames(frame)[0][1]

    signer.sign_chunk(b"")
    assert signer.state is ChunkSignerState.TERMINAL
    with pytest.raises(ValueError):
        signer.sign_chunk(b"more")
    with pytest.raises(ValueError):
        signer.sign_chunk(b"")


def test_chunk_signing_is_deterministic() -> None:
    first, second = new_chunk_signer(), new_chunk_signer()
    assert first.sign_chunk(b"abc") == second.sign_chunk(b"abc")
    assert first.sign_chunk(b"") == second.sign_chunk(b"")


@pytest.mark.parametrize(
    "decoded_length,chunk_size,expected",
    [
        (0, 65536, 86),
        (1, 65536, 86 + 87),
        (65536, 65536, 86 + 65626),
        (66560, 65536, 66824),
        (10, 3, 3 * 89 + 87 + 86),
    ],
)
def test_framed_content_length(
    decoded_length: int, chunk_size: int, expected: int
) -> None:
    assert framed_content_length(decoded_length, chunk_size) == expected


@pytest.mark.parametrize(
    "payload,chunk_size",
    [
        (b"", 65536),
        (b"a" * 66560, 65536),
        (b"a" * 65536, 65536),
        (bytes(range(256)) * 10, 1000),
        (b"x", 1),
    ],
)
def test_payload_framing(payload: bytes, chunk_size: int) -> None:
    body = AWSChunkedPayload(
        source=BytesIO(payload),
        chunk_signer=new_chunk_signer(),
        chunk_size=chunk_size,
        decoded_length=len(payload),
    )
    framed = b"".join(body)
    frames = parse_frames(framed)

    assert len(framed) == body.content_length
    assert len(framed) == framed_content_length(len(payload), chunk_size)
    assert body.decoded_content_length == len(payload)
    assert b"".join(data for _, _, data in frames) == payload
    assert sum(size for size, _, _ in frames) == len(payload)
    assert all(size == chunk_size for size, _, _ in frames[:-2])
    assert frames[-1][0] == 0
    assert all(size > 0 for size, _, _ in frames[:-1])


def test_payload_reslices_irregular_pieces() -> None:
    body = AWSChunkedPayload(
        source=[b"ab", b"cdefg", b"", b"h"],
        chunk_signer=new_chunk_signer(),
        chunk_size=3,
        decoded_length=8,
    )
    frames = parse_frames(b"".join(body))
    assert [data for _, _, data in frames] == [b"abc", b"def", b"gh", b""]


def test_payload_from_bytes() -> None:
    body = AWSChunkedPayload(
        source=b"hello",
        chunk_signer=new_chunk_signer(),
        chunk_size=65536,
        decoded_length=5,
    )
    frames = parse_frames(b"".join(body))
    assert [data for _, _, data in frames] == [b"hello", b""]


def test_payload_read_matches_iteration() -> None:
    payload = b"0123456789" * 50

    def new_body() -> AWSChunkedPayload:
        return AWSChunkedPayload(
            source=BytesIO(payload),
            chunk_signer=new_chunk_signer(),
            chunk_size=64,
            decoded_length=len(payload),
        )

    expected = b"".join(new_body())
    body = new_body()
    parts = []
    while part := body.read(100):
        parts.append(part)
    assert all(len(part) == 100 for part in parts[:-1])
    assert b"".join(parts) == expected
    assert body.read(100) == b""
    assert new_body().read() == expected


def test_payload_shorter_than_declared() -> None:
    body = AWSChunkedPayload(
        source=BytesIO(b"abc"),
        chunk_signer=new_chunk_signer(),
        chunk_size=2,
        decoded_length=4,
    )
    with pytest.raises(ValueError):
        b"".join(body)


def test_payload_longer_than_declared() -> None:
    body = AWSChunkedPayload(
        source=BytesIO(b"abcdef"),
        chunk_signer=new_chunk_signer(),
        chunk_size=4,
        decoded_length=2,
    )
    with pytest.raises(ValueError):
        b"".join(body)


class FailingStream:
    def __init__(self, first: bytes):
        self._first: bytes | None = first

    def read(self, size: int | None = -1, /) -> bytes:
        if self._first is None:
            raise OSError("connection reset")
        data, self._first = self._first, None
        return data


def test_payload_source_error_propagates() -> None:
    chunk_signer = new_chunk_signer()
    body = AWSChunkedPayload(
        source=FailingStream(b"abcd"),
        chunk_signer=chunk_signer,
        chunk_size=4,
        decoded_length=8,
    )
    frames = iter(body)
    first = next(frames)
    assert parse_frames(first)[0][2] == b"abcd"

    with pytest.raises(OSError):
        next(frames)
    assert chunk_signer.state is ChunkSignerState.SIGNING
    assert chunk_signer.previous_signature == parse_frames(first)[0][1]
