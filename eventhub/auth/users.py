from __future__ import annotations

from typing import Any

import bcrypt

from ..events.models import User, UserLocation
from ..storage.repository import UserRepository


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def demo_users() -> list[User]:
    """Demo accounts for the in-memory store."""
    return [
        User(
            id="demo-user",
            username="user",
            name="Demo User",
            interests=["Tech", "Music"],
            location=UserLocation(coordinates=[47.6062, -122.3321]),
            password_hash=hash_password("user123"),
        ),
        User(
            id="demo-admin",
            username="admin",
            name="Demo Admin",
            role="admin",
            password_hash=hash_password("admin123"),
        ),
    ]


def session_user(user: User) -> dict[str, Any]:
    return {"id": user.id, "username": user.username, "role": user.role}


def authenticate(users: UserRepository, username: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns ``{id, username, role}`` or ``None``."""
    record = users.get_by_username(username)
    if record and record.password_hash and _verify_password(password, record.password_hash):
        return session_user(record)
    return None
