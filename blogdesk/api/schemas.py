"""
Request payloads for the JSON API.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from blogdesk.errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def _as_bool(value: Any) -> bool:
    """Form submissions send "true"/"false" strings; anything else is False."""
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return value is True


def parse_payload(model: Type[ModelT], raw: Optional[Dict[str, Any]]) -> ModelT:
    try:
        return model.model_validate(raw or {})
    except PydanticValidationError as exc:
        messages = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error.get("loc", ()))
            messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg", ""))
        raise ValidationError("; ".join(messages) or "Invalid request body") from exc


class RoleAccessUpdate(BaseModel):
    role: str
    page: str
    can_view: bool = False
    can_add: bool = False
    can_edit: bool = False
    can_delete: bool = False

    @model_validator(mode="before")
    @classmethod
    def accept_camel_case(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            for camel, snake in (("canView", "can_view"), ("canAdd", "can_add"),
                                 ("canEdit", "can_edit"), ("canDelete", "can_delete")):
                if camel in data and snake not in data:
                    data[snake] = data.pop(camel)
        return data

    @field_validator("can_view", "can_add", "can_edit", "can_delete", mode="before")
    @classmethod
    def coerce_bool(cls, value: Any) -> bool:
        return _as_bool(value)


class ModuleAccessUpdate(BaseModel):
    role: str
    module: str
    capability: str
    value: bool

    @field_validator("value", mode="before")
    @classmethod
    def coerce_bool(cls, value: Any) -> bool:
        return _as_bool(value)


class RoleAssignment(BaseModel):
    role: Optional[str] = None
    roles: Optional[List[str]] = None

    @model_validator(mode="after")
    def require_role(self) -> "RoleAssignment":
        if not self.role and not self.roles:
            raise ValueError("Role is required")
        return self

    def role_list(self) -> List[str]:
        return list(self.roles) if self.roles else [self.role]


class DemoUserAssignment(BaseModel):
    role: str
    email: Optional[str] = None
    user_id: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def accept_user_id_alias(cls, data: Any) -> Any:
        if isinstance(data, dict) and "userId" in data and "user_id" not in data:
            data = dict(data)
            data["user_id"] = data.pop("userId")
        return data

    @model_validator(mode="after")
    def require_target(self) -> "DemoUserAssignment":
        if not self.email and not self.user_id:
            raise ValueError("Either email or userId is required")
        return self


class BlogPostCreate(BaseModel):
    title: str
    content: str
    published: bool = False

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must not be empty")
        return value.strip()


class BlogPostUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    published: Optional[bool] = None


class SignInProfile(BaseModel):
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    image: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> str:
        text = str(value if value is not None else "").strip()
        if not text:
            raise ValueError("must not be empty")
        return text
