# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
import re
import string
from dataclasses import dataclass
from urllib.parse import parse_qsl, quote

_ESCAPE_TRIPLET = re.compile(r"%[0-9A-Fa-f]{2}")
_QUOTED_OR_WHITESPACE = re.compile(r'("[^"]*")|\s+')
_UNRESERVED = frozenset(string.ascii_letters + string.digits + "-._~")


@dataclass(frozen=True, kw_only=True)
class CanonicalRequest:
    """The normalized form of a request that is hashed into the string to sign.

    The SigV4 specification defines the canonical request to be:
        <HTTPMethod>\\n
        <CanonicalURI>\\n
        <CanonicalQueryString>\\n
        <CanonicalHeaders>\\n
        <SignedHeaders>\\n
        <HashedPayload>
    """

    method: str
    uri: str
    query: str
    fields: tuple[tuple[str, str], ...]
    """Lower-cased field names and their canonical values, sorted by name."""

    payload_hash: str

    @property
    def signed_headers(self) -> str:
        return ";".join(name for name, _ in self.fields)

    @property
    def canonical_fields(self) -> str:
        # Every entry, including the last one, is newline terminated.
        return "".join(f"{name}:{value}\n" for name, value in self.fields)

    def build(self) -> str:
        return (
            f"{self.method}\n"
            f"{self.uri}\n"
            f"{self.query}\n"
            f"{self.canonical_fields}\n"
            f"{self.signed_headers}\n"
            f"{self.payload_hash}"
        )


def format_canonical_path(
    path: str | None, *, uri_encode_path: bool = False, normalize_path: bool = True
) -> str:
    """Build the canonical URI from an already percent-encoded path.

    :param path: The path as it will be sent on the wire.
    :param uri_encode_path: Encode every segment a second time, as required by
        services other than S3. When false, the path is encoded once with
        :py:func:`encode_path`.
    :param normalize_path: Remove dot segments and consecutive slashes first.
    """
    if not path:
        path = "/"
    if normalize_path:
        path = remove_dot_segments(path) or "/"
    if uri_encode_path:
        return quote(string=path, safe="/")
    return encode_path(path)


def encode_path(path: str) -> str:
    """Percent-encode each path segment, keeping ``/`` and valid escapes.

    Valid ``%XX`` triplets are normalized per :rfc:`3986#section-6.2.2` rather
    than encoded again: the hex digits are upper-cased and triplets that stand for
    unreserved characters are decoded.
    """
    return "/".join(_encode_path_segment(segment) for segment in path.split("/"))


def _encode_path_segment(segment: str) -> str:
    parts: list[str] = []
    position = 0
    for match in _ESCAPE_TRIPLET.finditer(segment):
        parts.append(quote(segment[position : match.start()], safe=""))
        parts.append(_normalize_escape(match.group()))
        position = match.end()
    parts.append(quote(segment[position:], safe=""))
    return "".join(parts)


def _normalize_escape(triplet: str) -> str:
    char = chr(int(triplet[1:], 16))
    if char in _UNRESERVED:
        return char
    return triplet.upper()


def format_canonical_query(query: str | None) -> str:
    if not query:
        return ""

    query_params = parse_qsl(qs=query, keep_blank_values=True)
    query_parts = (
        (quote(string=key, safe=""), quote(string=value, safe=""))
        for key, value in query_params
    )
    # key-value pairs must be in sorted order for their encoded forms.
    return "&".join(f"{key}={value}" for key, value in sorted(query_parts))


def normalize_field_value(value: str) -> str:
    """Trim a header value and collapse whitespace runs to a single space.

    Text inside double quotes is passed through verbatim.
    """
    return _QUOTED_OR_WHITESPACE.sub(
        lambda match: match.group(1) or " ", value.strip()
    )


def remove_dot_segments(path: str, remove_consecutive_slashes: bool = True) -> str:
    """Removes dot segments from a path per :rfc:`3986#section-5.2.4`.

    Optionally removes consecutive slashes, true by default.
    :param path: The path to modify.
    :param remove_consecutive_slashes: Whether to remove consecutive slashes.
    :returns: The path with dot segments removed.
    """
    output: list[str] = []
    for segment in path.split("/"):
        if segment == ".":
            continue
        elif segment != "..":
            output.append(segment)
        elif output:
            output.pop()
    if path.startswith("/") and (not output or output[0]):
        output.insert(0, "")
    if output and path.endswith(("/.", "/..")):
        output.append("")
    result = "/".join(output)
    if remove_consecutive_slashes:
        result = re.sub(r"/{2,}", "/", result)
    return result
