import hmac
from datetime import datetime

from flask import Blueprint, jsonify, request, current_app
from flask_login import login_user, logout_user, login_required, current_user
from flask_babel import gettext as _
from sqlalchemy.exc import IntegrityError

from blogdesk import db, csrf
from blogdesk.access_store import identity_role_store, store_errors
from blogdesk.api.schemas import SignInProfile, parse_payload
from blogdesk.errors import StoreUnavailable, ValidationError
from blogdesk.models.user import User
from blogdesk.permissions import resolve_identity


auth_bp = Blueprint("auth", __name__)
csrf.exempt(auth_bp)


def _bridge_authorized() -> bool:
    expected = current_app.config.get("IDENTITY_BRIDGE_SECRET")
    if not expected:
        return False
    presented = request.headers.get("X-Identity-Bridge-Secret") or ""
    return hmac.compare_digest(presented.encode("utf-8"), expected.encode("utf-8"))


def complete_sign_in(profile: SignInProfile) -> User:
    """
    Record a verified identity-provider profile and open a session for it.
    First sign-in creates the user and assigns the default role.
    An email already held by another user is refused.
    """
    email = (profile.email or "").strip().lower() or None
    try:
        with store_errors("sign-in"):
            user = db.session.get(User, profile.id)
            if user is None:
                user = User(id=profile.id, email=email, name=profile.name, image=profile.image)
                db.session.add(user)
            else:
                if email:
                    user.email = email
                if profile.name:
                    user.name = profile.name
                if profile.image:
                    user.image = profile.image
                user.updated_at = datetime.utcnow()
            db.session.commit()
    except StoreUnavailable as exc:
        if email and isinstance(exc.__cause__, IntegrityError):
            raise ValidationError(_("Email %(email)s is already linked to another account.", email=email)) from exc
        raise

    identity_role_store.ensure(user.id)
    login_user(user)
    return user


def _session_payload(user: User) -> dict:
    identity = resolve_identity(user.id).to_dict()
    return {
        "user": {
            "id": user.id,
            "email": user.email,
            "name": user.display_name,
            "image": user.image,
            "roles": identity["roles"],
            "primary_role": identity["primary_role"],
            "permissions": identity["permissions"],
        }
    }


@auth_bp.route("/sign-in", methods=["POST"])
def sign_in():
    if not _bridge_authorized():
        current_app.logger.warning("Rejected sign-in from %s: bad bridge secret", request.remote_addr)
        return jsonify({"error": _("Sign-in is not permitted.")}), 403
    profile = parse_payload(SignInProfile, request.get_json(silent=True))
    user = complete_sign_in(profile)
    current_app.logger.info("Identity %s signed in", user.id)
    return jsonify(_session_payload(user))


@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout():
    identity_id = current_user.get_id()
    logout_user()
    current_app.logger.info("Identity %s signed out", identity_id)
    return jsonify({"success": True, "message": _("You have been logged out.")})


@auth_bp.route("/session", methods=["GET"])
def session_info():
    if not current_user.is_authenticated:
        return jsonify({"user": None})
    return jsonify(_session_payload(current_user))
