"""Data models shared across the service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from bson import ObjectId

_ZERO_OBJECT_ID = b"\x00" * 12


def _zero_object_id() -> ObjectId:
    return ObjectId(_ZERO_OBJECT_ID)


@dataclass
class UserSession:
    """A signed-in user's session data."""

    user_id: ObjectId = field(default_factory=_zero_object_id)
    email: str = ""
    refresh_token: str = ""
    auth_token: str = ""
    name: str = ""
    photo: str = ""
    swift_token: str = ""
    dev_token_key: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready representation."""
        return {
            "user_id": str(self.user_id),
            "email": self.email,
            "refresh_token": self.refresh_token,
            "auth_token": self.auth_token,
            "name": self.name,
            "photo": self.photo,
            "swift_token": self.swift_token,
            "dev_token_key": self.dev_token_key,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UserSession":
        """Build a session from its JSON representation."""
        raw_id = data.get("user_id")
        user_id = _zero_object_id() if raw_id in (None, "") else ObjectId(raw_id)
        return cls(
            user_id=user_id,
            email=data.get("email", ""),
            refresh_token=data.get("refresh_token", ""),
            auth_token=data.get("auth_token", ""),
            name=data.get("name", ""),
            photo=data.get("photo", ""),
            swift_token=data.get("swift_token", ""),
            dev_token_key=bool(data.get("dev_token_key", False)),
        )