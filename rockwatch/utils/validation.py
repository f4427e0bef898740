# rockwatch/utils/validation.py
"""Helpers for turning request bodies into schema objects with readable errors."""

from pydantic import ValidationError


def describe_validation_error(exc: ValidationError) -> str:
    """'field: message; other.field: message', one entry per failing field."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "body"
        parts.append(f"{loc}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts)
