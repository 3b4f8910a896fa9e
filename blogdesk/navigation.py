# -*- coding: utf-8 -*-
"""
Page and module catalog, plus the navigation built from it for a signed-in identity.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from flask_babel import lazy_gettext as _l

from blogdesk.errors import ValidationError


class Capability(str, Enum):
    VIEW = "view"
    ADD = "add"
    EDIT = "edit"
    DELETE = "delete"

    @property
    def field(self) -> str:
        return f"can_{self.value}"

    @classmethod
    def parse(cls, value) -> "Capability":
        """Accept a Capability, 'edit', 'can_edit' or 'canEdit'."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower().replace("_", "")
        if text.startswith("can"):
            text = text[3:]
        for capability in cls:
            if capability.value == text:
                return capability
        raise ValidationError(f"Invalid capability '{value}'")


ADMIN_PAGE = "/admin"
EDITOR_PAGE = "/editor"
DASHBOARD_PAGE = "/dashboard"
BLOG_LIST_PAGE = "/blog"
BLOG_CREATE_PAGE = "/blog/create"
BLOG_ITEM_PAGE = "/blog/[id]"
BLOG_EDIT_PAGE = "/blog/[id]/edit"
PROFILE_PAGE = "/profile"

PAGE_DEFINITIONS: List[Dict[str, Any]] = [
    {"path": ADMIN_PAGE, "name": _l("Admin Dashboard"), "endpoint": "pages.admin"},
    {"path": EDITOR_PAGE, "name": _l("Editor Dashboard"), "endpoint": "pages.editor"},
    {"path": DASHBOARD_PAGE, "name": _l("User Dashboard"), "endpoint": "pages.dashboard"},
    {"path": BLOG_LIST_PAGE, "name": _l("Blog List"), "endpoint": "pages.blog_list"},
    {"path": BLOG_CREATE_PAGE, "name": _l("Create Blog"), "endpoint": "pages.blog_create"},
    {"path": BLOG_ITEM_PAGE, "name": _l("View Blog"), "endpoint": "pages.blog_item"},
    {"path": BLOG_EDIT_PAGE, "name": _l("Edit Blog"), "endpoint": "pages.blog_edit"},
    {"path": PROFILE_PAGE, "name": _l("User Profile"), "endpoint": "pages.profile"},
]

PAGES: Tuple[str, ...] = tuple(item["path"] for item in PAGE_DEFINITIONS)

ALL_CAPABILITIES = tuple(Capability)

MODULE_DEFINITIONS: List[Dict[str, Any]] = [
    {
        "key": "profile",
        "name": "Profile",
        "label": _l("User Profile"),
        "pages": (PROFILE_PAGE,),
        "capabilities": (Capability.VIEW, Capability.EDIT),
        "order": 10,
    },
    {
        "key": "blog",
        "name": "Blog",
        "label": _l("Blog Management"),
        "pages": (BLOG_LIST_PAGE, BLOG_CREATE_PAGE, BLOG_ITEM_PAGE, BLOG_EDIT_PAGE),
        "capabilities": ALL_CAPABILITIES,
        "order": 20,
    },
    {
        "key": "dashboard",
        "name": "Dashboard",
        "label": _l("User & Editor Dashboards"),
        "pages": (DASHBOARD_PAGE, EDITOR_PAGE),
        "capabilities": (Capability.VIEW,),
        "order": 30,
    },
    {
        "key": "admin",
        "name": "Admin",
        "label": _l("Admin Dashboard"),
        "pages": (ADMIN_PAGE,),
        "capabilities": (Capability.VIEW,),
        "order": 40,
    },
]


def is_known_page(page: str) -> bool:
    return page in PAGES


def validate_page(page: str) -> str:
    if not is_known_page(page):
        raise ValidationError(f"Invalid page path '{page}'")
    return page


def page_definition(page: str) -> Optional[Dict[str, Any]]:
    for item in PAGE_DEFINITIONS:
        if item["path"] == page:
            return item
    return None


def get_module(key: str) -> Dict[str, Any]:
    wanted = (key or "").strip().lower()
    for module in MODULE_DEFINITIONS:
        if module["key"] == wanted:
            return module
    raise ValidationError(f"Unknown module '{key}'")


def module_pages(key: str) -> Tuple[str, ...]:
    return get_module(key)["pages"]


def page_catalog() -> List[Dict[str, str]]:
    return [{"path": item["path"], "name": str(item["name"])} for item in PAGE_DEFINITIONS]


def module_catalog() -> List[Dict[str, Any]]:
    return [
        {
            "key": module["key"],
            "name": module["name"],
            "label": str(module["label"]),
            "pages": list(module["pages"]),
            "capabilities": [c.value for c in module["capabilities"]],
        }
        for module in sorted(MODULE_DEFINITIONS, key=lambda m: m.get("order", 0))
    ]


def get_navigation_for_user(identity_id) -> List[Dict[str, Any]]:
    """
    Group the pages an identity can view by module.
    Modules without a viewable page are left out.
    """
    from blogdesk.permissions import page_permission_map

    permissions = page_permission_map(identity_id)
    navigation = []
    for module in sorted(MODULE_DEFINITIONS, key=lambda m: m.get("order", 0)):
        links = []
        for page in module["pages"]:
            if not permissions[page].can_view:
                continue
            definition = page_definition(page)
            links.append({
                "path": page,
                "label": str(definition["name"]),
                "endpoint": definition["endpoint"],
            })
        if links:
            navigation.append({
                "key": module["key"],
                "label": str(module["label"]),
                "children": links,
            })
    return navigation
