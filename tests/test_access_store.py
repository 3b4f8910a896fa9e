import pytest
from sqlalchemy.exc import OperationalError

from blogdesk import db
from blogdesk.access_store import PageAccessStore, identity_role_store, page_access_store
from blogdesk.errors import StoreUnavailable, ValidationError
from blogdesk.models import RoleAccess, UserRole


def test_upsert_creates_entry(app):
    entry = page_access_store.upsert("editor", "/blog/create", can_view=True, can_add=True)

    assert entry.role == "editor"
    assert entry.page == "/blog/create"
    assert entry.can_add is True
    assert entry.can_edit is None
    assert entry.updated_at is not None
    assert page_access_store.get("editor", "/blog/create") == entry


def test_upsert_replaces_existing_entry(app):
    page_access_store.upsert("viewer", "/blog", can_view=True, can_add=True)
    entry = page_access_store.upsert("viewer", "/blog", can_view=False)

    assert RoleAccess.query.filter_by(role="viewer", page="/blog").count() == 1
    assert entry.can_view is False
    assert entry.can_add is None


def test_upsert_is_idempotent(app):
    first = page_access_store.upsert("editor", "/profile", can_view=True, can_edit=False)
    second = page_access_store.upsert("editor", "/profile", can_view=True, can_edit=False)

    assert RoleAccess.query.count() == 1
    assert (first.can_view, first.can_edit) == (second.can_view, second.can_edit)


def test_upsert_normalizes_role_name(app):
    entry = page_access_store.upsert(" Editor ", "/dashboard", can_view=True)
    assert entry.role == "editor"


def test_upsert_rejects_admin(app):
    with pytest.raises(ValidationError) as excinfo:
        page_access_store.upsert("admin", "/blog", can_view=False)
    assert "Admin role cannot be modified" in str(excinfo.value)
    assert RoleAccess.query.count() == 0


@pytest.mark.parametrize("role, page", [("guest", "/blog"), ("editor", "/settings"), ("editor", "/blog/7")])
def test_upsert_rejects_unknown_role_or_page(app, role, page):
    with pytest.raises(ValidationError):
        page_access_store.upsert(role, page, can_view=True)
    assert RoleAccess.query.count() == 0


def test_get_missing_entry_is_none(app):
    assert page_access_store.get("viewer", "/admin") is None


def test_get_for_roles_reads_every_held_role(app):
    page_access_store.upsert("viewer", "/blog", can_view=False)
    page_access_store.upsert("editor", "/blog", can_add=True)
    page_access_store.upsert("editor", "/profile", can_edit=True)

    stored = page_access_store.get_for_roles(["editor", "viewer"], "/blog")

    assert set(stored) == {"editor", "viewer"}
    assert stored["viewer"].can_view is False
    assert stored["editor"].can_add is True
    assert page_access_store.get_for_roles([], "/blog") == {}


def test_list_all_ordered_by_role_then_page(app):
    page_access_store.upsert("viewer", "/profile", can_view=True)
    page_access_store.upsert("editor", "/dashboard", can_view=True)
    page_access_store.upsert("editor", "/blog", can_view=True)

    listed = [(entry.role, entry.page) for entry in page_access_store.list_all()]
    assert listed == [("editor", "/blog"), ("editor", "/dashboard"), ("viewer", "/profile")]


def test_upsert_many_validates_before_writing(app):
    entries = {
        "/blog": {"can_view": True},
        "/nowhere": {"can_view": True},
    }
    with pytest.raises(ValidationError):
        page_access_store.upsert_many("editor", entries)
    assert RoleAccess.query.count() == 0


def test_upsert_many_rolls_back_on_database_failure(app, monkeypatch):
    """A failure on the second page leaves the first one unwritten."""
    original = PageAccessStore._apply
    applied = []

    def flaky_apply(self, role, page, values):
        if applied:
            raise OperationalError("UPDATE role_access", {}, Exception("database went away"))
        applied.append(page)
        return original(self, role, page, values)

    monkeypatch.setattr(PageAccessStore, "_apply", flaky_apply)

    with pytest.raises(StoreUnavailable):
        page_access_store.upsert_many("editor", {
            "/blog": {"can_view": True},
            "/blog/create": {"can_add": True},
        })

    monkeypatch.undo()
    assert applied == ["/blog"]
    assert RoleAccess.query.count() == 0


def test_reads_report_store_unavailable(app):
    db.drop_all()

    with pytest.raises(StoreUnavailable):
        page_access_store.get("editor", "/blog")
    with pytest.raises(StoreUnavailable):
        identity_role_store.get("someone")


def test_ensure_assigns_default_role_once(app):
    record = identity_role_store.ensure("user-1")
    assert record.roles == ("viewer",)

    identity_role_store.set_roles("user-1", ["editor"])
    again = identity_role_store.ensure("user-1")

    assert again.roles == ("editor",)
    assert UserRole.query.filter_by(user_id="user-1").count() == 1


def test_set_roles_keeps_primary_first(app):
    record = identity_role_store.set_roles("user-2", ["Editor", "viewer", "editor"])
    assert record.roles == ("editor", "viewer")
    assert record.primary_role == "editor"
    assert identity_role_store.get("user-2").roles == ("editor", "viewer")


def test_set_roles_rejects_unknown_role(app):
    identity_role_store.set_roles("user-3", ["viewer"])
    with pytest.raises(ValidationError):
        identity_role_store.set_roles("user-3", ["owner"])
    assert identity_role_store.get("user-3").roles == ("viewer",)


def test_role_lookups_for_missing_identity(app):
    assert identity_role_store.get("ghost") is None
    assert identity_role_store.get(None) is None


def test_list_all_role_records(app):
    identity_role_store.set_roles("b-user", ["viewer"])
    identity_role_store.set_roles("a-user", ["admin"])
    assert [record.user_id for record in identity_role_store.list_all()] == ["a-user", "b-user"]


def test_ensure_returns_record_created_concurrently(app, monkeypatch):
    """Another sign-in creates the record between our read and our insert."""
    identity_role_store.set_roles("racer", ["editor"])
    real_get = identity_role_store.get
    reads = []

    def stale_first_read(user_id):
        reads.append(user_id)
        if len(reads) == 1:
            return None
        return real_get(user_id)

    monkeypatch.setattr(identity_role_store, "get", stale_first_read)

    record = identity_role_store.ensure("racer")

    assert record.roles == ("editor",)
    assert len(reads) == 2
    assert UserRole.query.filter_by(user_id="racer").count() == 1
