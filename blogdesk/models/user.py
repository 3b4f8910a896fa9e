# -*- coding: utf-8 -*-
"""
Signed-in identities.
Rows are keyed by the identity provider's stable user id and are never deleted.
"""

from datetime import datetime
from flask_login import UserMixin
from blogdesk import db


class User(UserMixin, db.Model):
    __tablename__ = "user"

    id = db.Column(db.String(64), primary_key=True)
    email = db.Column(db.String(255), unique=True)
    name = db.Column(db.String(150))
    image = db.Column(db.String(512))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def display_name(self) -> str:
        return self.name or self.email or self.id

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email or "N/A",
            "name": self.name or "N/A",
            "image": self.image,
        }

    def __repr__(self):
        return f"<User {self.id} {self.email}>"
