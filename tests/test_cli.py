from blogdesk import db
from blogdesk.access_store import identity_role_store
from blogdesk.models import User
from blogdesk.seeds import ensure_default_admins


def _add_user(user_id, email):
    db.session.add(User(id=user_id, email=email, name=user_id))
    db.session.commit()


def test_assign_role_by_email(app):
    _add_user("u-42", "writer@example.com")

    result = app.test_cli_runner().invoke(args=["assign-role", "writer@example.com", "editor"])

    assert result.exit_code == 0, result.output
    assert "Role 'editor' assigned to writer@example.com" in result.output
    assert identity_role_store.get("u-42").roles == ("editor",)


def test_assign_role_by_id(app):
    _add_user("u-43", "reader@example.com")

    result = app.test_cli_runner().invoke(args=["assign-role", "u-43", "admin"])

    assert result.exit_code == 0, result.output
    assert identity_role_store.get("u-43").roles == ("admin",)


def test_assign_role_unknown_user(app):
    result = app.test_cli_runner().invoke(args=["assign-role", "nobody@example.com", "admin"])

    assert result.exit_code != 0
    assert "User not found" in result.output


def test_assign_role_invalid_role(app):
    _add_user("u-44", "someone@example.com")

    result = app.test_cli_runner().invoke(args=["assign-role", "u-44", "owner"])

    assert result.exit_code != 0
    assert "Invalid role" in result.output
    assert identity_role_store.get("u-44") is None


def test_seed_admins_keeps_existing_roles(app):
    identity_role_store.set_roles("ops", ["editor"])
    app.config["DEFAULT_ADMIN_IDS"] = ["ops", "founder"]

    assert ensure_default_admins(app) == 2
    assert identity_role_store.get("ops").roles == ("admin", "editor")
    assert identity_role_store.get("founder").roles == ("admin",)
    assert ensure_default_admins(app) == 0


def test_seed_admins_command(app):
    app.config["DEFAULT_ADMIN_IDS"] = ["founder"]

    result = app.test_cli_runner().invoke(args=["seed-admins"])

    assert result.exit_code == 0, result.output
    assert "Admin role granted to 1 identities." in result.output


def test_seed_admins_without_ids(app):
    assert ensure_default_admins(app) == 0


def test_assign_role_reports_store_outage(app):
    User.__table__.drop(db.engine)

    result = app.test_cli_runner().invoke(args=["assign-role", "u-45", "editor"])

    assert result.exit_code != 0
    assert "unavailable" in result.output
