"""
Guarded page endpoints.
The UI asks these before rendering a page; each answers with the caller's capabilities there.
"""

from flask import Blueprint, jsonify
from flask_login import current_user

from blogdesk.navigation import (
    ADMIN_PAGE,
    BLOG_CREATE_PAGE,
    BLOG_EDIT_PAGE,
    BLOG_ITEM_PAGE,
    BLOG_LIST_PAGE,
    DASHBOARD_PAGE,
    EDITOR_PAGE,
    PROFILE_PAGE,
    Capability,
)
from blogdesk.permissions import require_page_permission, resolve_page_permissions

pages_bp = Blueprint("pages", __name__)


def _page_response(page: str):
    return jsonify({
        "page": page,
        "permissions": resolve_page_permissions(current_user.get_id(), page).to_dict(),
    })


@pages_bp.route("/admin")
@require_page_permission(ADMIN_PAGE)
def admin():
    return _page_response(ADMIN_PAGE)


@pages_bp.route("/editor")
@require_page_permission(EDITOR_PAGE)
def editor():
    return _page_response(EDITOR_PAGE)


@pages_bp.route("/dashboard")
@require_page_permission(DASHBOARD_PAGE)
def dashboard():
    return _page_response(DASHBOARD_PAGE)


@pages_bp.route("/blog")
@require_page_permission(BLOG_LIST_PAGE)
def blog_list():
    return _page_response(BLOG_LIST_PAGE)


@pages_bp.route("/blog/create")
@require_page_permission(BLOG_CREATE_PAGE, Capability.ADD)
def blog_create():
    return _page_response(BLOG_CREATE_PAGE)


@pages_bp.route("/blog/<int:post_id>")
@require_page_permission(BLOG_ITEM_PAGE)
def blog_item(post_id):
    return _page_response(BLOG_ITEM_PAGE)


@pages_bp.route("/blog/<int:post_id>/edit")
@require_page_permission(BLOG_EDIT_PAGE, Capability.EDIT)
def blog_edit(post_id):
    return _page_response(BLOG_EDIT_PAGE)


@pages_bp.route("/profile")
@require_page_permission(PROFILE_PAGE)
def profile():
    return _page_response(PROFILE_PAGE)
