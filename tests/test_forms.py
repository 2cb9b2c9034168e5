from datetime import datetime

import pytest
from starlette.datastructures import FormData

from bookmarks_api.api.forms import (
    parse_checkbox,
    parse_int,
    parse_reference,
    parse_tags,
    read_bookmark_form,
    read_category_form,
)
from bookmarks_api.core.slug import create_slug


@pytest.mark.parametrize("raw", ["5", '"5"', '{"value": 5}', '{"value": "5", "label": "Reading"}'])
def test_reference_shapes_resolve_to_the_same_id(raw):
    assert parse_reference(raw) == 5


@pytest.mark.parametrize("raw", [None, "", "null", '"null"', '{"value": null}'])
def test_empty_references_resolve_to_none(raw):
    assert parse_reference(raw) is None


@pytest.mark.parametrize("raw", ["{not json", '"abc"', "true", "[1]"])
def test_malformed_reference_raises(raw):
    with pytest.raises(ValueError):
        parse_reference(raw)


def test_checkbox_on_means_now():
    assert isinstance(parse_checkbox("on"), datetime)
    assert parse_checkbox(None) is None
    assert parse_checkbox("off") is None


def test_parse_int_defaults_to_zero():
    assert parse_int(None) == 0
    assert parse_int("") == 0
    assert parse_int("3") == 3
    with pytest.raises(ValueError):
        parse_int("three")


def test_parse_tags_mixes_existing_and_new():
    tags = parse_tags('[{"value": 7, "label": "python"}, "rust", {"value": "go", "label": "go", "created": true}]')
    assert [(t.id, t.name) for t in tags] == [(7, "python"), (None, "rust"), (None, "go")]


def test_parse_tags_defaults_and_errors():
    assert parse_tags(None) == []
    assert parse_tags("[]") == []
    with pytest.raises(ValueError):
        parse_tags('{"value": 1}')
    with pytest.raises(ValueError):
        parse_tags("[")


def test_read_bookmark_form():
    form = FormData(
        [
            ("url", "https://example.com/post"),
            ("title", "A Post"),
            ("importance", "2"),
            ("flagged", "on"),
            ("category", '{"value": 5, "label": "Reading"}'),
            ("tags", '["news"]'),
        ]
    )
    parsed = read_bookmark_form(form)
    assert parsed.url == "https://example.com/post"
    assert parsed.importance == 2
    assert parsed.flagged is not None
    assert parsed.category_id == 5
    assert parsed.description is None
    assert [t.name for t in parsed.tags] == ["news"]
    assert "tags" not in parsed.bookmark_fields()


def test_read_category_form_derives_slug():
    form = FormData([("name", "Café Reading List"), ("parent", "null"), ("public", "on")])
    parsed = read_category_form(form)
    assert parsed.slug == "cafe-reading-list"
    assert parsed.parent_id is None
    assert parsed.public is not None
    assert parsed.archived is None


def test_read_category_form_requires_name():
    with pytest.raises(ValueError):
        read_category_form(FormData([("name", "  ")]))


@pytest.mark.parametrize(
    "text, slug",
    [
        ("Hello, Wörld!", "hello-world"),
        ("  Many   spaces  ", "many-spaces"),
        ("already-a-slug", "already-a-slug"),
        ("", ""),
        (None, ""),
    ],
)
def test_create_slug(text, slug):
    assert create_slug(text) == slug
