"""
Boundary parsing for form actions.

Everything here turns raw form strings into typed values. Malformed input
raises ValueError; callers decide whether to report or propagate it.
"""
from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, List, Optional

from starlette.datastructures import FormData

from bookmarks_api.core.slug import create_slug
from bookmarks_api.schemas.bookmarks import TagInput
from bookmarks_api.schemas.forms import BookmarkForm, CategoryForm

CHECKBOX_ON = "on"

BOOKMARK_TEXT_FIELDS = (
    "url",
    "domain",
    "title",
    "description",
    "author",
    "content_text",
    "content_html",
    "content_type",
    "content_published_date",
    "main_image_url",
    "icon_url",
    "note",
)


def form_text(form: FormData, name: str) -> Optional[str]:
    value = form.get(name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"Field {name!r} must be text")
    return value


def _reference_id(value: Any) -> Optional[int]:
    if value is None or value == "" or value == "null":
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid reference: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value.strip())
    raise ValueError(f"Invalid reference: {value!r}")


# PUBLIC_INTERFACE
def parse_reference(raw: Optional[str]) -> Optional[int]:
    """
    Resolve a relation reference to an id.

    Accepts a raw id (`5`, `"5"`), a select option (`{"value": 5}`) or `null`.
    All of them go through this one function so both shapes behave the same.

    Raises:
        ValueError: malformed JSON or a value that is not an id.
    """
    if raw is None or raw.strip() == "":
        return None
    value = json.loads(raw)
    if isinstance(value, dict):
        value = value.get("value")
    return _reference_id(value)


# PUBLIC_INTERFACE
def parse_checkbox(value: Optional[str]) -> Optional[datetime]:
    """A checked checkbox (`on`) becomes the current UTC time, anything else None."""
    return datetime.now(tz=timezone.utc) if value == CHECKBOX_ON else None


# PUBLIC_INTERFACE
def parse_int(value: Optional[str], default: int = 0) -> int:
    if value is None or value.strip() == "":
        return default
    return int(value.strip())


# PUBLIC_INTERFACE
def parse_tags(raw: Optional[str]) -> List[TagInput]:
    """
    Parse the `tags` field: a JSON list of existing tags (`{"value": <id>, "label": <name>}`)
    and free-form names (a bare string or `{"value": "<name>", "label": "<name>"}`).

    Raises:
        ValueError: malformed JSON or an entry of an unknown shape.
    """
    if raw is None or raw.strip() == "":
        return []
    items = json.loads(raw)
    if not isinstance(items, list):
        raise ValueError("Tags must be a JSON list")

    tags: List[TagInput] = []
    for item in items:
        if isinstance(item, str):
            tags.append(TagInput(name=item))
        elif isinstance(item, int) and not isinstance(item, bool):
            tags.append(TagInput(id=item))
        elif isinstance(item, dict):
            value = item.get("value")
            label = item.get("label")
            if isinstance(value, int) and not isinstance(value, bool):
                tags.append(TagInput(id=value, name=str(label or "")))
            else:
                tags.append(TagInput(name=str(label or value or "")))
        else:
            raise ValueError(f"Invalid tag: {item!r}")
    return tags


# PUBLIC_INTERFACE
def read_bookmark_form(form: FormData) -> BookmarkForm:
    """Build a BookmarkForm from the create/update bookmark form fields."""
    values = {name: form_text(form, name) for name in BOOKMARK_TEXT_FIELDS}
    return BookmarkForm(
        **values,
        importance=parse_int(form_text(form, "importance")),
        flagged=parse_checkbox(form_text(form, "flagged")),
        category_id=parse_reference(form_text(form, "category")),
        tags=parse_tags(form_text(form, "tags")),
    )


# PUBLIC_INTERFACE
def read_category_form(form: FormData) -> CategoryForm:
    """Build a CategoryForm; the slug is derived from the name."""
    name = (form_text(form, "name") or "").strip()
    if not name:
        raise ValueError("Category name is required")
    return CategoryForm(
        name=name,
        slug=create_slug(name),
        description=form_text(form, "description"),
        icon=form_text(form, "icon"),
        color=form_text(form, "color"),
        parent_id=parse_reference(form_text(form, "parent")),
        archived=parse_checkbox(form_text(form, "archived")),
        public=parse_checkbox(form_text(form, "public")),
    )
