"""
Role catalog: the closed set of roles and the coarse permissions each one grants.
"""

from functools import wraps
from types import MappingProxyType
from typing import FrozenSet, Iterable, Mapping, Optional, Tuple

from flask import abort
from flask_login import current_user

from blogdesk.errors import ValidationError

ADMIN = "admin"
EDITOR = "editor"
VIEWER = "viewer"

AVAILABLE_ROLES: Tuple[str, ...] = (ADMIN, EDITOR, VIEWER)
DEFAULT_ROLE = VIEWER

# Coarse permission strings
ADMIN_DASHBOARD = "admin.dashboard"
ADMIN_USERS = "admin.users"
ADMIN_SETTINGS = "admin.settings"
POSTS_READ = "posts.read"
POSTS_WRITE = "posts.write"
POSTS_DELETE = "posts.delete"
USERS_READ = "users.read"
USERS_WRITE = "users.write"
USERS_DELETE = "users.delete"
EDITOR_DASHBOARD = "editor.dashboard"
VIEWER_DASHBOARD = "viewer.dashboard"

ROLE_PERMISSIONS: Mapping[str, FrozenSet[str]] = MappingProxyType({
    ADMIN: frozenset({
        ADMIN_DASHBOARD,
        ADMIN_USERS,
        ADMIN_SETTINGS,
        POSTS_READ,
        POSTS_WRITE,
        POSTS_DELETE,
        USERS_READ,
        USERS_WRITE,
        USERS_DELETE,
        EDITOR_DASHBOARD,
        VIEWER_DASHBOARD,
    }),
    EDITOR: frozenset({
        POSTS_READ,
        POSTS_WRITE,
        POSTS_DELETE,
        USERS_READ,
        EDITOR_DASHBOARD,
        VIEWER_DASHBOARD,
    }),
    VIEWER: frozenset({
        POSTS_READ,
        USERS_READ,
        VIEWER_DASHBOARD,
    }),
})

ROUTE_PERMISSIONS: Mapping[str, FrozenSet[str]] = MappingProxyType({
    "/admin": frozenset({ADMIN_DASHBOARD}),
    "/editor": frozenset({EDITOR_DASHBOARD}),
    "/dashboard": frozenset({VIEWER_DASHBOARD}),
})


def normalize_role(role) -> str:
    return (role or "").strip().lower()


def is_admin(roles: Optional[Iterable[str]]) -> bool:
    return bool(roles) and ADMIN in roles


def validate_roles(roles: Iterable[str]) -> Tuple[str, ...]:
    """
    Normalize a role list for storage.
    Order is preserved (the first role is the primary one) and duplicates dropped.
    """
    if isinstance(roles, str):
        roles = [roles]
    cleaned = []
    for role in roles or ():
        name = normalize_role(role)
        if name not in AVAILABLE_ROLES:
            raise ValidationError(
                f"Invalid role '{role}'. Must be one of: {', '.join(AVAILABLE_ROLES)}"
            )
        if name not in cleaned:
            cleaned.append(name)
    if not cleaned:
        raise ValidationError("At least one role is required")
    return tuple(cleaned)


def permissions_for_roles(
    roles: Iterable[str],
    catalog: Mapping[str, FrozenSet[str]] = ROLE_PERMISSIONS,
) -> FrozenSet[str]:
    granted = set()
    for role in roles or ():
        granted |= catalog.get(role, frozenset())
    return frozenset(granted)


def has_role(roles: Optional[Iterable[str]], required_role: str) -> bool:
    return required_role in (roles or ())


def has_permission(granted: Iterable[str], required: str, roles: Optional[Iterable[str]] = None) -> bool:
    if is_admin(roles):
        return True
    return required in set(granted or ())


def has_any_permission(granted: Iterable[str], required: Iterable[str], roles: Optional[Iterable[str]] = None) -> bool:
    if is_admin(roles):
        return True
    granted = set(granted or ())
    return any(perm in granted for perm in required)


def has_all_permissions(granted: Iterable[str], required: Iterable[str], roles: Optional[Iterable[str]] = None) -> bool:
    if is_admin(roles):
        return True
    granted = set(granted or ())
    return all(perm in granted for perm in required)


def route_permissions(path: str) -> FrozenSet[str]:
    """Permissions required for a path, matched on the longest route prefix."""
    path = path or ""
    best = None
    for route in ROUTE_PERMISSIONS:
        if path == route or path.startswith(route + "/"):
            if best is None or len(route) > len(best):
                best = route
    return ROUTE_PERMISSIONS[best] if best else frozenset()


def role_required(*roles):
    """
    Restrict access to identities holding at least one of the given roles.
    Example: @role_required('admin', 'editor')
    """
    wanted = {normalize_role(r) for r in roles}

    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            from blogdesk.permissions import effective_roles

            if not current_user.is_authenticated:
                abort(401)
            held = effective_roles(current_user.get_id())
            if not wanted.intersection(held):
                abort(403)
            return f(*args, **kwargs)
        return wrapper
    return decorator
