# -*- coding: utf-8 -*-
"""
Blogdesk JSON API (role access, users, own permissions).
Session based; identities sign in through the auth blueprint.
"""

from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user

from blogdesk import db, csrf
from blogdesk.access_store import identity_role_store, page_access_store, store_errors
from blogdesk.api.schemas import (
    DemoUserAssignment,
    ModuleAccessUpdate,
    RoleAccessUpdate,
    RoleAssignment,
    parse_payload,
)
from blogdesk.errors import NotFoundError
from blogdesk.models import User
from blogdesk.navigation import (
    get_navigation_for_user,
    module_catalog,
    page_catalog,
    page_definition,
)
from blogdesk.permissions import (
    access_matrix,
    page_permission_map,
    resolve_identity,
    resolve_page_permissions,
    update_module_permission,
)
from blogdesk.utils.roles import DEFAULT_ROLE, USERS_READ, has_permission, role_required

api_bp = Blueprint("api", __name__)
csrf.exempt(api_bp)


# ───────── Helpers ───────── #
def _error(message: str, status: int = 400):
    return jsonify({"error": message}), status


def _json_body():
    return request.get_json(silent=True) or {}


# ───────── Role access ───────── #
@api_bp.route("/role-access", methods=["GET"])
@login_required
def get_role_access():
    matrix = access_matrix()
    result = {}
    for role, pages in matrix.items():
        result[role] = {}
        for page, perms in pages.items():
            result[role][page] = {
                "page": page,
                "page_name": str(page_definition(page)["name"]),
                **perms.to_dict(),
            }
    return jsonify({
        "success": True,
        "role_access": result,
        "pages": page_catalog(),
        "modules": module_catalog(),
    })


@api_bp.route("/role-access", methods=["PUT"])
@role_required("admin")
def update_role_access():
    payload = parse_payload(RoleAccessUpdate, _json_body())
    entry = page_access_store.upsert(
        payload.role,
        payload.page,
        can_view=payload.can_view,
        can_add=payload.can_add,
        can_edit=payload.can_edit,
        can_delete=payload.can_delete,
    )
    current_app.logger.info(
        "Role access updated by %s: role=%s page=%s view=%s add=%s edit=%s delete=%s",
        current_user.get_id(), entry.role, entry.page,
        entry.can_view, entry.can_add, entry.can_edit, entry.can_delete,
    )
    return jsonify({
        "success": True,
        "message": "Role access updated successfully",
        "role_access": entry.to_dict(),
    })


@api_bp.route("/role-access/module", methods=["PUT"])
@role_required("admin")
def update_module_access():
    payload = parse_payload(ModuleAccessUpdate, _json_body())
    entries = update_module_permission(payload.role, payload.module, payload.capability, payload.value)
    current_app.logger.info(
        "Module access updated by %s: role=%s module=%s %s=%s (%d pages)",
        current_user.get_id(), payload.role, payload.module,
        payload.capability, payload.value, len(entries),
    )
    return jsonify({
        "success": True,
        "message": "Module access updated successfully",
        "role_access": [entry.to_dict() for entry in entries],
    })


# ───────── Users ───────── #
@api_bp.route("/users", methods=["GET"])
@login_required
def list_users():
    me = resolve_identity(current_user.get_id())
    if not has_permission(me.permissions, USERS_READ, me.roles):
        return _error("Insufficient permissions", 403)
    records = {record.user_id: record for record in identity_role_store.list_all()}
    with store_errors("user list"):
        users = User.query.order_by(User.created_at.asc()).all()
    items = []
    for user in users:
        record = records.get(user.id)
        items.append({
            **user.to_dict(),
            "roles": list(record.roles) if record else [DEFAULT_ROLE],
        })
    return jsonify({"success": True, "users": items, "total": len(items)})


@api_bp.route("/users/<user_id>/role", methods=["PUT"])
@role_required("admin")
def update_user_role(user_id):
    payload = parse_payload(RoleAssignment, _json_body())
    record = identity_role_store.set_roles(user_id, payload.role_list())
    current_app.logger.info("Roles of %s set to %s by %s", user_id, list(record.roles), current_user.get_id())
    return jsonify({
        "success": True,
        "message": f"Role '{record.primary_role}' updated successfully",
        "user_id": record.user_id,
        "roles": list(record.roles),
    })


@api_bp.route("/setup-demo-users", methods=["POST"])
@role_required("admin")
def setup_demo_users():
    payload = parse_payload(DemoUserAssignment, _json_body())
    with store_errors("user lookup"):
        if payload.user_id:
            user = db.session.get(User, payload.user_id)
        else:
            user = User.query.filter_by(email=payload.email.strip().lower()).first()
    if user is None:
        if payload.user_id:
            raise NotFoundError("User not found with provided userId")
        raise NotFoundError("User not found. Please sign in first.")

    record = identity_role_store.set_roles(user.id, [payload.role])
    current_app.logger.info("Demo role %s assigned to %s", record.primary_role, user.id)
    return jsonify({
        "success": True,
        "message": f"Role '{record.primary_role}' assigned to {user.email or user.id}",
        "user_id": user.id,
        "roles": list(record.roles),
    })


# ───────── Current identity ───────── #
@api_bp.route("/me/permissions", methods=["GET"])
@login_required
def my_permissions():
    identity_id = current_user.get_id()
    page = request.args.get("page")
    if page:
        return jsonify({
            "page": page,
            "permissions": resolve_page_permissions(identity_id, page).to_dict(),
        })
    permissions = page_permission_map(identity_id)
    return jsonify({
        "identity": resolve_identity(identity_id).to_dict(),
        "pages": {page: perms.to_dict() for page, perms in permissions.items()},
    })


@api_bp.route("/navigation", methods=["GET"])
@login_required
def navigation():
    return jsonify({"navigation": get_navigation_for_user(current_user.get_id())})
