"""Ready-made schemas for common form inputs and admin content types.

``COMMON_SCHEMAS`` covers single inputs (email, password, username, phone,
url) and a postal address. ``ENTITY_SCHEMAS`` describes the content records
edited in the admin dashboard: articles, case studies, profiles, categories
and testimonials.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .schema import Schema

if TYPE_CHECKING:
    from .validator import SchemaValidator

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"
SLUG_MESSAGE = "Must contain only lowercase letters, numbers, and hyphens"


def content_size(value: Any, record: Any = None) -> bool | str:
    """Rich-text content must hold between 10 and 10,000 words.

    ``value`` is an editor document with a ``text`` entry, or plain text.
    """
    text = value.get("text", "") if isinstance(value, dict) else str(value or "")
    words = len(text.split())
    if words < 10:
        return "Content must contain at least 10 words"
    if words > 10000:
        return "Content cannot exceed 10,000 words"
    return True


def _slug(max_length: int, required: bool = False) -> dict[str, Any]:
    return {
        "required": required,
        "pattern": SLUG_PATTERN,
        "pattern_message": SLUG_MESSAGE,
        "max_length": max_length,
    }


def _text(min_length: int | None, max_length: int, required: bool = True) -> dict[str, Any]:
    return {"required": required, "min_length": min_length, "max_length": max_length}


COMMON_SCHEMAS: dict[str, Schema] = {
    "email": Schema({
        "email": {"required": True, "email": True},
    }),
    "password": Schema({
        "password": {
            "required": True,
            "min_length": 8,
            "pattern": r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]",
            "pattern_message": "Password must contain uppercase, lowercase, number and special character",
        },
    }),
    "username": Schema({
        "username": {
            "required": True,
            "min_length": 3,
            "max_length": 20,
            "pattern": r"^[a-zA-Z0-9_]+$",
            "pattern_message": "Username can only contain letters, numbers and underscores",
        },
    }),
    "phone": Schema({
        "phone": {
            "required": True,
            "pattern": r"^\+?[\d\s\-\(\)]+$",
            "min_length": 10,
            "max_length": 15,
        },
    }),
    "url": Schema({
        "url": {"required": True, "url": True},
    }),
    "address": Schema({
        "street": {"required": True, "min_length": 5},
        "city": {"required": True, "min_length": 2},
        "state": {"required": True, "min_length": 2},
        "zip_code": {
            "required": True,
            "pattern": r"^\d{5}(-\d{4})?$",
            "pattern_message": "Invalid ZIP code format",
        },
        "country": {"required": True},
    }),
}

ENTITY_SCHEMAS: dict[str, Schema] = {
    "article": Schema({
        "title": _text(5, 200),
        "slug": _slug(100),
        "excerpt": _text(None, 500, required=False),
        "content": {"required": True, "validate": content_size},
        "meta_title": _text(None, 60, required=False),
        "meta_description": _text(None, 160, required=False),
        "canonical_url": {"url": True},
        "og_image": {"url": True},
        "category_id": {"required": True},
    }),
    "case_study": Schema({
        "title": _text(5, 200),
        "client_name": _text(2, 100),
        "slug": _slug(100),
        "client_website": {"url": True},
        "description": _text(20, 500),
        "industry": {"required": True},
        "service_type": {"required": True},
    }),
    "profile": Schema({
        "email": {"required": True, "email": True},
        "full_name": _text(2, 100),
        "role": {"required": True, "one_of": ["admin", "contributor", "standard"]},
        "linkedin_url": {"url": True},
        "twitter_url": {"url": True},
        "github_url": {"url": True},
    }),
    "category": Schema({
        "name": _text(2, 50),
        "slug": _slug(50, required=True),
        "type": {"required": True, "one_of": ["article", "resource", "case_study"]},
    }),
    "testimonial": Schema({
        "client_name": _text(2, 100),
        "quote": _text(10, 1000),
        "rating": {"required": True, "one_of": [1, 2, 3, 4, 5]},
    }),
}


def register_common_schemas(validator: SchemaValidator, include_entities: bool = True) -> None:
    """Register the ready-made schemas on a validator under their names."""
    for name, schema in COMMON_SCHEMAS.items():
        validator.register_schema(name, schema)
    if include_entities:
        for name, schema in ENTITY_SCHEMAS.items():
            validator.register_schema(name, schema)
