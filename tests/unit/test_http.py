#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import copy
from io import BytesIO

import pytest
from aws_request_signer import URI, AWSRequest, Field, Fields


def test_field_single_valued_basics() -> None:
    field = Field(name="fname", values=["fval"])
    assert field.name == "fname"
    assert field.values == ["fval"]
    assert field.as_string() == "fval"


def test_field_multi_valued_basics() -> None:
    field = Field(name="fname", values=["fval1", "fval2"])
    assert field.values == ["fval1", "fval2"]
    assert field.as_string() == "fval1, fval2"


@pytest.mark.parametrize(
    "values,expected",
    [
        ([], ""),
        (["val1"], "val1"),
        (['"val1"'], '"val1"'),
        (["val1", "val2"], "val1, val2"),
        (["val1", "val2,val3", "val4"], 'val1, "val2,val3", val4'),
        (["slc", '4,196"'], 'slc, "4,196\\""'),
        (["foo,bar\\", "val2"], '"foo,bar\\\\", val2'),
    ],
)
def test_field_serialization(values: list[str], expected: str) -> None:
    field = Field(name="_", values=values)
    assert field.as_string() == expected


def test_field_add_keeps_duplicates() -> None:
    field = Field(name="fname", values=["a"])
    field.add("b")
    field.add("a")
    assert field.values == ["a", "b", "a"]


def test_field_repr() -> None:
    field = Field(name="fname", values=["fval1", "fval2"])
    assert repr(field) == "Field(name='fname', values=['fval1', 'fval2'])"


def test_fields_are_case_insensitive() -> None:
    fields = Fields([Field(name="Content-Type", values=["text/plain"])])
    assert "content-type" in fields
    assert "CONTENT-TYPE" in fields
    assert fields["content-TYPE"].name == "Content-Type"
    assert fields.get("missing") is None


def test_fields_merge_duplicate_names() -> None:
    fields = Fields(
        [
            Field(name="X-Amz-Meta", values=["a"]),
            Field(name="x-amz-meta", values=["b"]),
        ]
    )
    assert len(fields) == 1
    assert fields["X-Amz-Meta"].values == ["a", "b"]


def test_fields_set_field_replaces_values() -> None:
    fields = Fields([Field(name="X-Amz-Date", values=["old"])])
    fields.set_field(Field(name="x-amz-date", values=["new"]))
    assert len(fields) == 1
    assert fields["X-Amz-Date"].values == ["new"]


def test_fields_remove_field() -> None:
    fields = Fields([Field(name="A", values=["1"]), Field(name="B", values=["2"])])
    fields.remove_field("a")
    fields.remove_field("missing")
    assert "A" not in fields
    fields.remove_field("B")
    assert len(fields) == 0


def test_fields_equality_requires_same_order() -> None:
    first = Fields([Field(name="A", values=["1"]), Field(name="B", values=["2"])])
    second = Fields([Field(name="A", values=["1"]), Field(name="B", values=["2"])])
    reordered = Fields([Field(name="B", values=["2"]), Field(name="A", values=["1"])])
    assert first == second
    assert first != reordered


@pytest.mark.parametrize(
    "uri,expected",
    [
        (URI(host="example.com"), "https://example.com"),
        (URI(host="example.com", port=8000), "https://example.com:8000"),
        (
            URI(scheme="http", host="example.com", path="/a%20b", query="x=1"),
            "http://example.com/a%20b?x=1",
        ),
        (
            URI(host="example.com", path="/", fragment="frag"),
            "https://example.com/#frag",
        ),
    ],
)
def test_uri_build(uri: URI, expected: str) -> None:
    assert uri.build() == expected


def test_uri_netloc() -> None:
    assert URI(host="example.com").netloc == "example.com"
    assert URI(host="example.com", port=443).netloc == "example.com:443"


def test_uri_with_query_params_encodes_values() -> None:
    uri = URI(host="example.com", path="/", query="list-type=2")
    updated = uri.with_query_params(
        [("X-Amz-Credential", "AKID/20130524/us-east-1/s3/aws4_request")]
    )
    assert uri.query == "list-type=2"
    assert updated.query == (
        "list-type=2&X-Amz-Credential=AKID%2F20130524%2Fus-east-1%2Fs3%2Faws4_request"
    )
    assert updated.host == uri.host
    assert updated.path == uri.path


def test_uri_with_query_params_without_existing_query() -> None:
    uri = URI(host="example.com")
    assert uri.with_query_params([("a", "b c")]).query == "a=b%20c"


def test_request_deepcopy_copies_fields_only() -> None:
    body = BytesIO(b"payload")
    request = AWSRequest(
        destination=URI(host="example.com"),
        method="PUT",
        body=body,
        fields=Fields([Field(name="Range", values=["bytes=0-9"])]),
    )
    copied = copy.deepcopy(request)
    copied.fields.set_field(Field(name="X-Amz-Date", values=["20130524T000000Z"]))

    assert copied is not request
    assert copied.body is body
    assert copied.destination is request.destination
    assert "X-Amz-Date" not in request.fields
    assert copied.fields["range"].values == ["bytes=0-9"]
