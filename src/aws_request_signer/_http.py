# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""Minimal HTTP request model consumed and produced by the signers.

Signers only read from an ``AWSRequest`` and write to a deep copy of it, so these
types favor a small, predictable surface over completeness.
"""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Iterable, Iterator
from copy import deepcopy
from dataclasses import dataclass, replace
from functools import cached_property
from typing import TypeAlias
from urllib.parse import quote, urlencode, urlunparse

from .interfaces.io import AsyncPayload, ChunkSource

Body: TypeAlias = bytes | bytearray | ChunkSource | AsyncPayload | None


class Field:
    """A named HTTP header with one or more values.

    Field names are case insensitive. The name is preserved as given for
    transmission, while lookups in :py:class:`Fields` use the lower-cased name.
    """

    def __init__(self, *, name: str, values: Iterable[str] | None = None):
        self.name = name
        self.values: list[str] = list(values) if values is not None else []

    def add(self, value: str) -> None:
        """Append a value to a field."""
        self.values.append(value)

    def as_string(self, delimiter: str = ", ") -> str:
        """Get a single line value suitable for transmission.

        Zero values produce the empty string and a single value is returned
        unmodified. When joining multiple values, any value containing a comma or a
        double quote is quoted and its quotes and backslashes escaped.
        """
        if not self.values:
            return ""
        if len(self.values) == 1:
            return self.values[0]
        return delimiter.join(quote_and_escape_field_value(val) for val in self.values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Field):
            return False
        return self.name == other.name and self.values == other.values

    def __repr__(self) -> str:
        return f"Field(name={self.name!r}, values={self.values!r})"


class Fields:
    def __init__(self, initial: Iterable[Field] | None = None):
        """Ordered collection of header fields keyed by lower-cased name.

        :param initial: Initial ``Field`` objects. Fields sharing a name (ignoring
            case) are merged into one entry, keeping the values in occurrence order.
        """
        self.entries: OrderedDict[str, Field] = OrderedDict()
        for fld in initial or ():
            if fld.name.lower() in self.entries:
                for value in fld.values:
                    self.entries[fld.name.lower()].add(value)
            else:
                self.entries[fld.name.lower()] = Field(name=fld.name, values=fld.values)

    def set_field(self, field: Field) -> None:
        """Set or replace the entry for ``field.name``."""
        self.entries[field.name.lower()] = field

    def remove_field(self, name: str) -> None:
        """Remove the entry for ``name`` if present."""
        self.entries.pop(name.lower(), None)

    def get(self, key: str, default: Field | None = None) -> Field | None:
        return self[key] if key in self else default

    def __getitem__(self, name: str) -> Field:
        return self.entries[name.lower()]

    def __contains__(self, key: str) -> bool:
        return key.lower() in self.entries

    def __iter__(self) -> Iterator[Field]:
        yield from self.entries.values()

    def __len__(self) -> int:
        return len(self.entries)

    def __eq__(self, other: object) -> bool:
        """Entries must match in values and order."""
        if not isinstance(other, Fields):
            return False
        return self.entries == other.entries

    def __repr__(self) -> str:
        return f"Fields({list(self.entries.values())})"


@dataclass(kw_only=True, frozen=True)
class URI:
    """Target location of an :py:class:`AWSRequest`."""

    scheme: str = "https"
    """For example ``http`` or ``https``."""

    host: str
    """The hostname, for example ``amazonaws.com``."""

    port: int | None = None
    """An explicit port number."""

    path: str | None = None
    """Path component of the URI in its percent-encoded, on-the-wire form."""

    query: str | None = None
    """Query component of the URI in its percent-encoded, on-the-wire form."""

    fragment: str | None = None
    """Part of the URI specification, but not transmitted or signed."""

    @property
    def netloc(self) -> str:
        """Construct netloc string in format ``{host}:{port}``.

        The port is only included if set.
        """
        return self._netloc

    # cached_property does NOT behave like property, it actually allows for setting.
    # Therefore we need a layer of indirection.
    @cached_property
    def _netloc(self) -> str:
        if self.port is not None:
            return f"{self.host}:{self.port}"
        return self.host

    def build(self) -> str:
        """Construct the URI string ``{scheme}://{host}:{port}{path}?{query}``."""
        components = (
            self.scheme,
            self.netloc,
            self.path or "",
            "",  # params
            self.query,
            self.fragment,
        )
        return urlunparse(components)

    def with_query_params(self, params: Iterable[tuple[str, str]]) -> URI:
        """Get a copy of the URI with ``params`` appended to the query."""
        encoded = urlencode(list(params), quote_via=quote, safe="")
        query = f"{self.query}&{encoded}" if self.query else encoded
        return replace(self, query=query)


class AWSRequest:
    def __init__(
        self,
        *,
        destination: URI,
        method: str,
        body: Body,
        fields: Fields,
    ):
        self.destination = destination
        self.method = method
        self.body = body
        self.fields = fields

    def __deepcopy__(self, memo: dict[int, AWSRequest] | None = None) -> AWSRequest:
        if memo is None:
            memo = {}

        if id(self) in memo:
            return memo[id(self)]

        # the destination doesn't need to be copied because it's immutable
        # the body can't be copied because it may be a one-shot stream
        new_instance = self.__class__(
            destination=self.destination,
            body=self.body,
            method=self.method,
            fields=deepcopy(self.fields, memo),
        )
        memo[id(self)] = new_instance
        return new_instance

    def __repr__(self) -> str:
        return (
            f"AWSRequest(method={self.method!r}, "
            f"destination={self.destination.build()!r}, fields={self.fields!r})"
        )


def quote_and_escape_field_value(value: str) -> str:
    """Escapes and quotes a single :class:`Field` value if necessary.

    See :func:`Field.as_string` for quoting and escaping logic.
    """
    chars_to_quote = (",", '"')
    if any(char in chars_to_quote for char in value):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    else:
        return value
