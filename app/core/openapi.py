"""OpenAPI metadata and customization utilities.

Provides a helper to enrich the generated OpenAPI schema with:
- Tags metadata
- Bearer session and API Key (``X-API-Key``) security schemes, with
  per-path overrides for public endpoints

This keeps documentation concerns decoupled from the app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

PUBLIC_PATHS = ("/health", "/v1/auth/login", "/v1/auth/refresh")

TAGS_METADATA = [
    {"name": "Auth", "description": "Login, logout, token refresh and the current user."},
    {"name": "Users", "description": "User management (admin, moderator)."},
    {"name": "Dashboard", "description": "Overview stats, chart series and recent activity."},
    {"name": "Analytics", "description": "Traffic analytics (admin, moderator)."},
    {"name": "Reports", "description": "Report generation and export (admin)."},
    {"name": "Settings", "description": "System settings, API keys and rate-limit status."},
    {"name": "Notifications", "description": "Toast notification feed."},
    {"name": "Navigation", "description": "Sidebar items visible to the caller's role."},
    {"name": "Health", "description": "Liveness check."},
]


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add metadata and security.

    - Injects components.securitySchemes for Bearer sessions and API keys
    - Marks all operations as requiring either scheme by default, then
      exempts public endpoints by setting ``security: []``
    - Adds tags metadata if not present
    """

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        components = schema.setdefault("components", {})
        security_schemes = components.setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "BearerAuth",
            {
                "type": "http",
                "scheme": "bearer",
                "description": "Session token returned by POST /v1/auth/login.",
            },
        )
        security_schemes.setdefault(
            "ApiKeyAuth",
            {
                "type": "apiKey",
                "in": "header",
                "name": "X-API-Key",
                "description": "API key created on the settings page.",
            },
        )

        # Either scheme satisfies the requirement
        schema.setdefault("security", [{"BearerAuth": []}, {"ApiKeyAuth": []}])

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        for tag in TAGS_METADATA:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        paths = schema.get("paths", {})
        for path, methods in paths.items():
            if path in PUBLIC_PATHS:
                for method_obj in methods.values():
                    if isinstance(method_obj, dict):
                        method_obj["security"] = []

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
