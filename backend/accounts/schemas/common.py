"""Common Marshmallow schemas shared across resources."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, fields, post_load, validate


def split_sort(raw: str | None) -> list[str]:
    """``"-created_at, name"`` -> ``["-created_at", "name"]``."""
    return [segment.strip() for segment in (raw or "").split(",") if segment.strip()]


class PaginationQuerySchema(Schema):
    """Validate ``page``, ``limit`` and ``sort`` query parameters.

    Other query parameters are ignored so resource filters can share the
    same query string.
    """

    class Meta:
        unknown = EXCLUDE

    page = fields.Integer(load_default=1, validate=validate.Range(min=1))
    limit = fields.Integer(validate=validate.Range(min=1))
    sort = fields.String(load_default="")

    def __init__(self, *, default_limit: int = 20, max_limit: int = 100, **kwargs: Any) -> None:
        self._default_limit = default_limit
        self._max_limit = max_limit
        super().__init__(**kwargs)

    @post_load
    def apply_defaults(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        data["sort"] = split_sort(data.get("sort"))
        data["limit"] = min(data.get("limit", self._default_limit), self._max_limit)
        return data


class MetaSchema(Schema):
    """Metadata block for paginated responses."""

    total = fields.Integer(required=True)
    page = fields.Integer(required=True)
    limit = fields.Integer(required=True)
    has_prev = fields.Boolean(required=True)
    has_next = fields.Boolean(required=True)

