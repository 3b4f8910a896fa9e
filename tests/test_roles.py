import pytest

from blogdesk.errors import ValidationError
from blogdesk.utils.roles import (
    ADMIN_DASHBOARD,
    ADMIN_USERS,
    EDITOR_DASHBOARD,
    POSTS_DELETE,
    POSTS_READ,
    POSTS_WRITE,
    ROLE_PERMISSIONS,
    USERS_READ,
    VIEWER_DASHBOARD,
    has_all_permissions,
    has_any_permission,
    has_permission,
    has_role,
    is_admin,
    permissions_for_roles,
    route_permissions,
    validate_roles,
)


def test_role_grants_nest():
    """viewer ⊂ editor ⊂ admin"""
    assert ROLE_PERMISSIONS["viewer"] < ROLE_PERMISSIONS["editor"] < ROLE_PERMISSIONS["admin"]
    assert ROLE_PERMISSIONS["viewer"] == {POSTS_READ, USERS_READ, VIEWER_DASHBOARD}
    assert POSTS_DELETE in ROLE_PERMISSIONS["editor"]


def test_catalog_is_read_only():
    with pytest.raises(TypeError):
        ROLE_PERMISSIONS["guest"] = frozenset()


def test_permissions_union_across_roles():
    granted = permissions_for_roles(["viewer", "editor"])
    assert granted == ROLE_PERMISSIONS["editor"]


def test_unknown_role_contributes_nothing():
    assert permissions_for_roles(["guest"]) == frozenset()
    assert permissions_for_roles([]) == frozenset()
    assert permissions_for_roles(None) == frozenset()


def test_admin_short_circuits_permission_checks():
    assert has_permission([], ADMIN_USERS, roles=["admin"])
    assert has_any_permission([], [ADMIN_USERS], roles=["viewer", "admin"])
    assert has_all_permissions([], [ADMIN_USERS, POSTS_WRITE], roles=["admin"])


def test_permission_checks_for_regular_roles():
    granted = ROLE_PERMISSIONS["editor"]
    assert has_permission(granted, POSTS_WRITE, roles=["editor"])
    assert not has_permission(granted, ADMIN_USERS, roles=["editor"])
    assert has_any_permission(granted, [ADMIN_USERS, POSTS_READ])
    assert not has_any_permission(granted, [ADMIN_USERS, ADMIN_DASHBOARD])
    assert has_all_permissions(granted, [POSTS_READ, EDITOR_DASHBOARD])
    assert not has_all_permissions(granted, [POSTS_READ, ADMIN_DASHBOARD])


def test_role_helpers():
    assert is_admin(["viewer", "admin"])
    assert not is_admin([])
    assert not is_admin(None)
    assert has_role(["editor"], "editor")
    assert not has_role(None, "editor")


def test_route_permissions_match_prefixes():
    assert route_permissions("/admin") == {ADMIN_DASHBOARD}
    assert route_permissions("/admin/users") == {ADMIN_DASHBOARD}
    assert route_permissions("/editor") == {EDITOR_DASHBOARD}
    assert route_permissions("/dashboard/stats") == {VIEWER_DASHBOARD}


def test_route_permissions_ignore_lookalike_paths():
    assert route_permissions("/editorial") == frozenset()
    assert route_permissions("/blog") == frozenset()
    assert route_permissions("") == frozenset()


def test_validate_roles_normalizes_and_dedupes():
    assert validate_roles(["Editor", " viewer", "editor"]) == ("editor", "viewer")
    assert validate_roles("admin") == ("admin",)


@pytest.mark.parametrize("roles", [["superuser"], [], ["viewer", "root"]])
def test_validate_roles_rejects_bad_input(roles):
    with pytest.raises(ValidationError):
        validate_roles(roles)
