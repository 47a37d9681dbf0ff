"""OpenAPI tag metadata and documentation of the rate limit response."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

TAGS_METADATA = [
    {"name": "OTP", "description": "Issue and verify one-time codes sent by SMS."},
    {"name": "M-Pesa", "description": "STK push proxy and payment status lookup."},
    {"name": "Health", "description": "Liveness checks (not rate limited)."},
]

_TOO_MANY_REQUESTS = {
    "description": "Too Many Requests. See Retry-After and X-RateLimit-* headers.",
}


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch OpenAPI generation to add tag metadata and the 429 response.

    The 429 is produced by middleware, so FastAPI cannot infer it per route.
    """
    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        for tag in TAGS_METADATA:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        for path, methods in schema.get("paths", {}).items():
            if path.endswith("/health"):
                continue
            for method_obj in methods.values():
                if isinstance(method_obj, dict):
                    method_obj.setdefault("responses", {}).setdefault("429", _TOO_MANY_REQUESTS)

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
