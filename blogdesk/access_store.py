# -*- coding: utf-8 -*-
"""
Persistence for role assignments and per-page access overrides.

Both stores hand out immutable snapshots rather than ORM rows, and report any
database failure as StoreUnavailable after rolling the session back.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from blogdesk import db
from blogdesk.errors import StoreUnavailable, ValidationError
from blogdesk.models import RoleAccess, UserRole
from blogdesk.navigation import validate_page
from blogdesk.utils.roles import ADMIN, AVAILABLE_ROLES, DEFAULT_ROLE, normalize_role, validate_roles

logger = logging.getLogger(__name__)

CAPABILITY_FIELDS = ("can_view", "can_add", "can_edit", "can_delete")


@dataclass(frozen=True)
class StoredAccess:
    role: str
    page: str
    can_view: Optional[bool] = None
    can_add: Optional[bool] = None
    can_edit: Optional[bool] = None
    can_delete: Optional[bool] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, row: RoleAccess) -> "StoredAccess":
        return cls(
            role=row.role,
            page=row.page,
            can_view=row.can_view,
            can_add=row.can_add,
            can_edit=row.can_edit,
            can_delete=row.can_delete,
            updated_at=row.updated_at,
        )

    def to_dict(self) -> dict:
        return {
            "role": self.role,
            "page": self.page,
            "can_view": self.can_view,
            "can_add": self.can_add,
            "can_edit": self.can_edit,
            "can_delete": self.can_delete,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class RoleRecord:
    user_id: str
    roles: Tuple[str, ...]
    updated_at: Optional[datetime] = None

    @property
    def primary_role(self) -> Optional[str]:
        return self.roles[0] if self.roles else None

    @classmethod
    def from_model(cls, row: UserRole) -> "RoleRecord":
        return cls(user_id=row.user_id, roles=tuple(row.roles or ()), updated_at=row.updated_at)


@contextmanager
def store_errors(action: str):
    try:
        yield
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Access store failure during %s: %s", action, exc)
        raise StoreUnavailable(f"Access store unavailable during {action}") from exc


def _validate_override_role(role: str) -> str:
    name = normalize_role(role)
    if name == ADMIN:
        raise ValidationError("Admin role cannot be modified. Admin has all permissions by default.")
    if name not in AVAILABLE_ROLES:
        raise ValidationError(f"Invalid role '{role}'. Must be editor or viewer")
    return name


class PageAccessStore:
    """Per-(role, page) capability overrides."""

    def get(self, role: str, page: str) -> Optional[StoredAccess]:
        with store_errors("read"):
            row = RoleAccess.query.filter_by(role=role, page=page).first()
        return StoredAccess.from_model(row) if row else None

    def get_for_roles(self, roles: Iterable[str], page: str) -> Dict[str, StoredAccess]:
        """One read for every held role on a page, keyed by role."""
        roles = list(roles)
        if not roles:
            return {}
        with store_errors("read"):
            rows = RoleAccess.query.filter(RoleAccess.role.in_(roles), RoleAccess.page == page).all()
        return {row.role: StoredAccess.from_model(row) for row in rows}

    def list_all(self) -> List[StoredAccess]:
        with store_errors("list"):
            rows = RoleAccess.query.order_by(RoleAccess.role.asc(), RoleAccess.page.asc()).all()
        return [StoredAccess.from_model(row) for row in rows]

    def upsert(self, role: str, page: str, *, can_view=None, can_add=None,
               can_edit=None, can_delete=None) -> StoredAccess:
        values = {
            "can_view": can_view,
            "can_add": can_add,
            "can_edit": can_edit,
            "can_delete": can_delete,
        }
        return self.upsert_many(role, {page: values})[0]

    def upsert_many(self, role: str, entries: Mapping[str, Mapping[str, Optional[bool]]]) -> List[StoredAccess]:
        """
        Create or replace several pages for one role in a single transaction.
        Everything is validated before the first write; on failure nothing is kept.
        """
        role = _validate_override_role(role)
        pages = [validate_page(page) for page in entries]
        for attempt in (1, 2):
            try:
                rows = [self._apply(role, page, entries[page]) for page in pages]
                db.session.commit()
                return [StoredAccess.from_model(row) for row in rows]
            except IntegrityError as exc:
                # A concurrent writer inserted the same (role, page); retry as an update.
                db.session.rollback()
                if attempt == 2:
                    logger.error("Access store upsert conflict for role=%s: %s", role, exc)
                    raise StoreUnavailable("Access store conflict while saving overrides") from exc
            except SQLAlchemyError as exc:
                db.session.rollback()
                logger.error("Access store failure during upsert: %s", exc)
                raise StoreUnavailable("Access store unavailable during upsert") from exc

    def _apply(self, role: str, page: str, values: Mapping[str, Optional[bool]]) -> RoleAccess:
        row = RoleAccess.query.filter_by(role=role, page=page).first()
        if row is None:
            row = RoleAccess(role=role, page=page)
            db.session.add(row)
        for field in CAPABILITY_FIELDS:
            value = values.get(field)
            setattr(row, field, None if value is None else bool(value))
        row.updated_at = datetime.utcnow()
        db.session.flush()
        return row


class IdentityRoleStore:
    """Role assignments keyed by external identity id."""

    def get(self, user_id) -> Optional[RoleRecord]:
        if user_id is None:
            return None
        with store_errors("read"):
            row = UserRole.query.filter_by(user_id=str(user_id)).first()
        return RoleRecord.from_model(row) if row else None

    def ensure(self, user_id) -> RoleRecord:
        """Return the identity's record, creating it with the default role on first sign-in."""
        existing = self.get(user_id)
        if existing:
            return existing
        try:
            with store_errors("create"):
                now = datetime.utcnow()
                row = UserRole(user_id=str(user_id), roles=[DEFAULT_ROLE], created_at=now, updated_at=now)
                db.session.add(row)
                db.session.commit()
                record = RoleRecord.from_model(row)
        except StoreUnavailable as exc:
            # A concurrent first sign-in created the record; use theirs.
            if not isinstance(exc.__cause__, IntegrityError):
                raise
            existing = self.get(user_id)
            if existing is None:
                raise
            logger.info("Role record for identity %s was created concurrently", user_id)
            return existing
        logger.info("Assigned default role %s to identity %s", DEFAULT_ROLE, user_id)
        return record

    def set_roles(self, user_id, roles: Iterable[str]) -> RoleRecord:
        cleaned = list(validate_roles(roles))
        with store_errors("role assignment"):
            row = UserRole.query.filter_by(user_id=str(user_id)).first()
            if row is None:
                row = UserRole(user_id=str(user_id), created_at=datetime.utcnow())
                db.session.add(row)
            row.roles = cleaned
            row.updated_at = datetime.utcnow()
            db.session.commit()
            return RoleRecord.from_model(row)

    def list_all(self) -> List[RoleRecord]:
        with store_errors("list"):
            rows = UserRole.query.order_by(UserRole.user_id.asc()).all()
        return [RoleRecord.from_model(row) for row in rows]


page_access_store = PageAccessStore()
identity_role_store = IdentityRoleStore()
