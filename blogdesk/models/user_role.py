# -*- coding: utf-8 -*-
"""
Role assignments per identity.
The first role in the list is the primary one; the full list is used for permission checks.
"""

from datetime import datetime
from blogdesk import db


def _default_roles():
    return ["viewer"]


class UserRole(db.Model):
    __tablename__ = "user_role"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, unique=True, index=True)
    roles = db.Column(db.JSON, nullable=False, default=_default_roles)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<UserRole {self.user_id} roles={self.roles}>"
