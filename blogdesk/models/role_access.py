# -*- coding: utf-8 -*-
"""
Page level permissions.
Stores per-role view/add/edit/delete overrides for catalog pages.
A NULL capability means "not set" and falls back to the page default.
"""

from datetime import datetime
from blogdesk import db


class RoleAccess(db.Model):
    __tablename__ = "role_access"

    id = db.Column(db.Integer, primary_key=True)
    role = db.Column(db.String(20), nullable=False)
    page = db.Column(db.String(64), nullable=False)
    can_view = db.Column(db.Boolean, nullable=True)
    can_add = db.Column(db.Boolean, nullable=True)
    can_edit = db.Column(db.Boolean, nullable=True)
    can_delete = db.Column(db.Boolean, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint("role", "page", name="uq_role_access_role_page"),
    )

    def __repr__(self):
        return (
            f"<RoleAccess {self.role} {self.page} view={self.can_view} add={self.can_add} "
            f"edit={self.can_edit} delete={self.can_delete}>"
        )
