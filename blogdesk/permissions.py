# -*- coding: utf-8 -*-
"""
Permission resolution and access decisions.

An identity's roles come from the IdentityRoleStore; page capabilities come from
the PageAccessStore overrides, defaulted per page type. Admin holds every
capability and is never looked up. Multiple roles are unioned for both coarse
permissions and page capabilities.
"""

from dataclasses import dataclass, replace
from functools import wraps
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

from flask import abort, current_app
from flask_login import current_user

from blogdesk.access_store import (
    IdentityRoleStore,
    PageAccessStore,
    StoredAccess,
    identity_role_store,
    page_access_store,
)
from blogdesk.errors import StoreUnavailable, ValidationError
from blogdesk.navigation import (
    BLOG_ITEM_PAGE,
    BLOG_LIST_PAGE,
    PAGES,
    PROFILE_PAGE,
    Capability,
    get_module,
    validate_page,
)
from blogdesk.utils.roles import (
    ADMIN,
    AVAILABLE_ROLES,
    ROLE_PERMISSIONS,
    is_admin,
    normalize_role,
    permissions_for_roles,
)


@dataclass(frozen=True)
class PagePermissions:
    can_view: bool = False
    can_add: bool = False
    can_edit: bool = False
    can_delete: bool = False

    @classmethod
    def allow_all(cls) -> "PagePermissions":
        return cls(True, True, True, True)

    @classmethod
    def deny_all(cls) -> "PagePermissions":
        return cls()

    def allows(self, action) -> bool:
        return getattr(self, Capability.parse(action).field)

    def union(self, other: "PagePermissions") -> "PagePermissions":
        return PagePermissions(
            can_view=self.can_view or other.can_view,
            can_add=self.can_add or other.can_add,
            can_edit=self.can_edit or other.can_edit,
            can_delete=self.can_delete or other.can_delete,
        )

    def to_dict(self) -> Dict[str, bool]:
        return {
            "can_view": self.can_view,
            "can_add": self.can_add,
            "can_edit": self.can_edit,
            "can_delete": self.can_delete,
        }


@dataclass(frozen=True)
class IdentityPermissions:
    identity_id: Optional[str]
    roles: Tuple[str, ...]
    permissions: FrozenSet[str]

    @property
    def primary_role(self) -> Optional[str]:
        return self.roles[0] if self.roles else None

    def to_dict(self) -> dict:
        return {
            "id": self.identity_id,
            "roles": list(self.roles),
            "primary_role": self.primary_role,
            "permissions": sorted(self.permissions),
        }


def apply_defaults(page: str, stored: Optional[StoredAccess]) -> PagePermissions:
    """
    Turn a stored override (or its absence) into concrete capabilities.

    Missing entry: view only, except /profile which grants everything.
    Existing entry: NULL view means True, NULL add/edit/delete mean False,
    except a NULL edit on /profile which means True.
    """
    is_profile = page == PROFILE_PAGE
    if stored is None:
        return PagePermissions(
            can_view=True,
            can_add=is_profile,
            can_edit=is_profile,
            can_delete=is_profile,
        )

    def pick(value, default):
        return default if value is None else bool(value)

    return PagePermissions(
        can_view=pick(stored.can_view, True),
        can_add=pick(stored.can_add, False),
        can_edit=pick(stored.can_edit, is_profile),
        can_delete=pick(stored.can_delete, False),
    )


class PermissionResolver:
    def __init__(
        self,
        roles_store: Optional[IdentityRoleStore] = None,
        access_store: Optional[PageAccessStore] = None,
        role_catalog: Mapping[str, FrozenSet[str]] = ROLE_PERMISSIONS,
    ):
        self.roles_store = roles_store or identity_role_store
        self.access_store = access_store or page_access_store
        self.role_catalog = role_catalog

    def effective_roles(self, identity_id) -> Tuple[str, ...]:
        """Known roles held by the identity, primary first; empty when there is no record."""
        if identity_id is None:
            return ()
        record = self.roles_store.get(identity_id)
        if record is None:
            return ()
        return tuple(role for role in record.roles if role in AVAILABLE_ROLES)

    def resolve_identity(self, identity_id) -> IdentityPermissions:
        roles = self.effective_roles(identity_id)
        return IdentityPermissions(
            identity_id=None if identity_id is None else str(identity_id),
            roles=roles,
            permissions=permissions_for_roles(roles, self.role_catalog),
        )

    def resolve_page_permissions(self, identity_id, page: str) -> PagePermissions:
        validate_page(page)
        roles = self.effective_roles(identity_id)
        if not roles:
            return PagePermissions.deny_all()
        return self.resolve_for_roles(roles, page)

    def resolve_for_roles(self, roles: Iterable[str], page: str) -> PagePermissions:
        roles = tuple(roles)
        if is_admin(roles):
            return PagePermissions.allow_all()
        result = self._merged(roles, page)
        # Viewing single posts implies viewing the listing.
        if page == BLOG_LIST_PAGE and not result.can_view:
            if self._merged(roles, BLOG_ITEM_PAGE).can_view:
                result = replace(result, can_view=True)
        return result

    def _merged(self, roles: Tuple[str, ...], page: str) -> PagePermissions:
        stored = self.access_store.get_for_roles(roles, page)
        result = PagePermissions.deny_all()
        for role in roles:
            result = result.union(apply_defaults(page, stored.get(role)))
        return result

    def page_permission_map(self, identity_id) -> Dict[str, PagePermissions]:
        return {page: self.resolve_page_permissions(identity_id, page) for page in PAGES}

    def access_matrix(self) -> Dict[str, Dict[str, PagePermissions]]:
        """
        Stored overrides with defaults applied, for every role and page.
        Rows are per page; the /blog listing promotion is a resolution rule and is not shown here.
        """
        index = {(entry.role, entry.page): entry for entry in self.access_store.list_all()}
        matrix: Dict[str, Dict[str, PagePermissions]] = {}
        for role in AVAILABLE_ROLES:
            matrix[role] = {}
            for page in PAGES:
                if role == ADMIN:
                    matrix[role][page] = PagePermissions.allow_all()
                else:
                    matrix[role][page] = apply_defaults(page, index.get((role, page)))
        return matrix

    def update_module_permission(self, role: str, module_key: str, action, value: bool):
        """
        Set one capability for every page of a module.
        The other capabilities of each page keep their current effective value.
        """
        role = normalize_role(role)
        module = get_module(module_key)
        capability = Capability.parse(action)
        if capability not in module["capabilities"]:
            raise ValidationError(
                f"Module '{module['name']}' does not support the {capability.value} capability"
            )
        if role == ADMIN:
            raise ValidationError("Admin role cannot be modified. Admin has all permissions by default.")
        entries = {}
        for page in module["pages"]:
            current = apply_defaults(page, self.access_store.get(role, page))
            entries[page] = replace(current, **{capability.field: bool(value)}).to_dict()
        return self.access_store.upsert_many(role, entries)


resolver = PermissionResolver()


def effective_roles(identity_id) -> Tuple[str, ...]:
    return resolver.effective_roles(identity_id)


def resolve_identity(identity_id) -> IdentityPermissions:
    return resolver.resolve_identity(identity_id)


def resolve_page_permissions(identity_id, page: str) -> PagePermissions:
    return resolver.resolve_page_permissions(identity_id, page)


def page_permission_map(identity_id) -> Dict[str, PagePermissions]:
    return resolver.page_permission_map(identity_id)


def access_matrix() -> Dict[str, Dict[str, PagePermissions]]:
    return resolver.access_matrix()


def update_module_permission(role: str, module_key: str, action, value: bool):
    return resolver.update_module_permission(role, module_key, action, value)


# ───────── Decisions ───────── #

def can_perform(identity_id, page: str, action, using: Optional[PermissionResolver] = None) -> bool:
    capability = Capability.parse(action)
    return (using or resolver).resolve_page_permissions(identity_id, page).allows(capability)


def can_perform_on_module(identity_id, module_pages: Iterable[str], action,
                          using: Optional[PermissionResolver] = None) -> bool:
    """True only when every page of the module grants the action. An empty module grants nothing."""
    pages = list(module_pages)
    if not pages:
        return False
    capability = Capability.parse(action)
    return all(can_perform(identity_id, page, capability, using=using) for page in pages)


def require_page_permission(page: str, action=Capability.VIEW):
    """
    Guard a view on a page capability for the signed-in identity.
    Store failures deny with 503.
    """
    validate_page(page)
    capability = Capability.parse(action)

    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            if not current_user.is_authenticated:
                abort(401)
            try:
                allowed = can_perform(current_user.get_id(), page, capability)
            except StoreUnavailable as exc:
                current_app.logger.error("Denied %s on %s: %s", capability.value, page, exc)
                abort(503)
            if not allowed:
                current_app.logger.info(
                    "Identity %s denied %s on %s", current_user.get_id(), capability.value, page)
                abort(403)
            return f(*args, **kwargs)
        return wrapper
    return decorator
