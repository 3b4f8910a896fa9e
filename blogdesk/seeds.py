from time import sleep
from typing import Any

import click
from sqlalchemy.exc import OperationalError

from blogdesk import db
from blogdesk.access_store import identity_role_store, store_errors
from blogdesk.errors import AccessError
from blogdesk.models.user import User
from blogdesk.utils.roles import ADMIN


def ensure_default_admins(app: Any) -> int:
    """Grant the admin role to every identity listed in DEFAULT_ADMIN_IDS."""
    admin_ids = [str(item).strip() for item in app.config.get("DEFAULT_ADMIN_IDS") or [] if str(item).strip()]
    if not admin_ids:
        app.logger.info("Skipping admin seeding (DEFAULT_ADMIN_IDS empty).")
        return 0

    granted = 0
    for identity_id in admin_ids:
        record = identity_role_store.get(identity_id)
        if record and ADMIN in record.roles:
            app.logger.debug("Identity %s already holds the admin role.", identity_id)
            continue
        roles = [ADMIN] + [role for role in (record.roles if record else ()) if role != ADMIN]
        identity_role_store.set_roles(identity_id, roles)
        granted += 1
        app.logger.info("Admin role granted to identity %s.", identity_id)
    return granted


def ensure_default_admins_with_retry(app: Any) -> int:
    """Retry wrapper so container startup can handle transient DB availability."""
    attempts = max(1, int(app.config.get("SEED_RETRY_ATTEMPTS", 5)))
    delay = float(app.config.get("SEED_RETRY_DELAY", 2))

    for attempt in range(1, attempts + 1):
        try:
            return ensure_default_admins(app)
        except AccessError as exc:
            if not isinstance(exc.__cause__, OperationalError) or attempt == attempts:
                app.logger.error(
                    "Unable to seed admin roles after %d attempts: %s", attempt, exc
                )
                raise
            app.logger.warning(
                "Database not ready (attempt %d/%d): %s; retrying in %.1f sec",
                attempt,
                attempts,
                exc,
                delay,
            )
            sleep(delay)
    return 0


def register_commands(app: Any) -> None:
    @app.cli.command("seed-admins")
    def seed_admins():
        """Grant admin to the identities in DEFAULT_ADMIN_IDS."""
        granted = ensure_default_admins_with_retry(app)
        click.echo(f"Admin role granted to {granted} identities.")

    @app.cli.command("assign-role")
    @click.argument("user_ref")
    @click.argument("role")
    def assign_role(user_ref, role):
        """Replace the roles of USER_REF (user id or email) with ROLE."""
        try:
            with store_errors("user lookup"):
                user = db.session.get(User, user_ref) or User.query.filter_by(email=user_ref).first()
            if user is None:
                raise click.ClickException(f"User not found: {user_ref}")
            record = identity_role_store.set_roles(user.id, [role])
        except AccessError as exc:
            raise click.ClickException(str(exc)) from exc
        click.echo(f"Role '{record.primary_role}' assigned to {user.email or user.id}.")
