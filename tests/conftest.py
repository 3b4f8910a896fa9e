import pytest

from blogdesk import create_app, db
from blogdesk.access_store import identity_role_store
from config import TestConfig

BRIDGE_HEADERS = {"X-Identity-Bridge-Secret": TestConfig.IDENTITY_BRIDGE_SECRET}


@pytest.fixture
def app():
    """Application bound to an in-memory database."""
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def assign(app):
    """Give an identity a role list directly through the store."""
    def _assign(identity_id, *roles):
        return identity_role_store.set_roles(identity_id, list(roles))
    return _assign


@pytest.fixture
def sign_in(client, assign):
    """Sign an identity in through the bridge, optionally with roles assigned first."""
    def _sign_in(identity_id, *roles, email=None, name=None):
        if roles:
            assign(identity_id, *roles)
        response = client.post(
            "/auth/sign-in",
            json={
                "id": identity_id,
                "email": email or f"{identity_id}@example.com",
                "name": name or identity_id.title(),
            },
            headers=BRIDGE_HEADERS,
        )
        assert response.status_code == 200, response.get_json()
        return response.get_json()
    return _sign_in
