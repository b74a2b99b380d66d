"""Sidebar navigation and the role gates shared with the API routes."""

from __future__ import annotations

from app.schemas.notification import NavItem
from app.schemas.user import UserRole

ADMIN_AND_MODERATOR: tuple[UserRole, ...] = ("admin", "moderator")
ADMIN_ONLY: tuple[UserRole, ...] = ("admin",)

NAV_ITEMS: tuple[NavItem, ...] = (
    NavItem(id="dashboard", label="Dashboard", icon="layout-dashboard", path="/"),
    NavItem(id="users", label="Users", icon="users", path="/users", required_roles=list(ADMIN_AND_MODERATOR)),
    NavItem(id="analytics", label="Analytics", icon="bar-chart", path="/analytics", required_roles=list(ADMIN_AND_MODERATOR)),
    NavItem(id="reports", label="Reports", icon="file-text", path="/reports", required_roles=list(ADMIN_ONLY)),
    NavItem(id="settings", label="Settings", icon="settings", path="/settings"),
)


def is_allowed(item: NavItem, role: str) -> bool:
    return not item.required_roles or role in item.required_roles


def navigation_for(role: str) -> list[NavItem]:
    """Items visible to ``role``, in sidebar order."""
    return [item for item in NAV_ITEMS if is_allowed(item, role)]
