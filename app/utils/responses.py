# app/utils/responses.py
"""Standard JSON envelope used by every endpoint: {success, message, data}."""

from typing import Any, Optional


def success_response(message: str = "Success", data: Any = None) -> dict:
    """Standardise successful API responses."""
    body = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    return body


def error_body(message: str, data: Optional[Any] = None) -> dict:
    """Standardise API error payloads."""
    body = {"success": False, "message": message}
    if data is not None:
        body["data"] = data
    return body


def serialize(schema, value):
    """Render ORM rows (or a list of them) through a pydantic schema into JSON-safe data."""
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return [schema.model_validate(v).model_dump(mode="json") for v in value]
    return schema.model_validate(value).model_dump(mode="json")


def serialize_page(schema, page: dict) -> dict:
    """Same as serialize() for the dict returned by utils.pagination.paginate()."""
    return {**page, "items": serialize(schema, page["items"])}
