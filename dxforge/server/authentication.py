"""Users, roles and session tokens for the server."""

from __future__ import annotations

import hashlib
import threading
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any


class AuthError(Exception):
    """Raised when an authentication operation fails."""


class Role(Enum):
    ADMIN = "admin"
    DEVELOPER = "developer"
    VIEWER = "viewer"


_ROLE_RANK = {Role.VIEWER: 0, Role.DEVELOPER: 1, Role.ADMIN: 2}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _hash_password(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


@dataclass
class User:
    """An account; the password is kept only as a SHA-256 hex digest."""

    id: str
    username: str
    password_hash: str
    role: Role
    email: str | None = None
    created_at: datetime = field(default_factory=_now)
    last_login: datetime | None = None

    @classmethod
    def create(cls, username: str, password: str, role: Role) -> User:
        """A new user with a fresh id and hashed password."""
        return cls(
            id=str(uuid.uuid4()),
            username=username,
            password_hash=_hash_password(password),
            role=role,
        )

    def verify_password(self, password: str) -> bool:
        return self.password_hash == _hash_password(password)

    def has_permission(self, required_role: Role) -> bool:
        """Admins may do anything, developers what developers and viewers may."""
        return _ROLE_RANK[self.role] >= _ROLE_RANK[required_role]

    def to_dict(self) -> dict[str, Any]:
        """Public representation; the password hash is left out."""
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "role": self.role.value,
            "created_at": self.created_at.isoformat(),
            "last_login": self.last_login.isoformat() if self.last_login else None,
        }


@dataclass
class Session:
    token: str
    user_id: str
    username: str
    role: Role
    created_at: datetime
    expires_at: datetime

    @classmethod
    def create(cls, user: User, duration_hours: float) -> Session:
        now = _now()
        return cls(
            token=str(uuid.uuid4()),
            user_id=user.id,
            username=user.username,
            role=user.role,
            created_at=now,
            expires_at=now + timedelta(hours=duration_hours),
        )

    def is_expired(self) -> bool:
        return _now() > self.expires_at


_DEFAULT_ADMIN = "admin"
_DEFAULT_ADMIN_PASSWORD = "password"


class AuthManager:
    """Registry of users and active sessions; thread-safe.

    A default ``admin`` account is created on construction.
    """

    def __init__(self, session_hours: float = 24) -> None:
        self._session_hours = session_hours
        self._lock = threading.Lock()
        admin = User.create(_DEFAULT_ADMIN, _DEFAULT_ADMIN_PASSWORD, Role.ADMIN)
        self._users: dict[str, User] = {admin.username: admin}
        self._sessions: dict[str, Session] = {}

    def register(self, username: str, password: str, role: Role) -> User:
        with self._lock:
            if username in self._users:
                raise AuthError("Username already exists")
            user = User.create(username, password, role)
            self._users[username] = user
            return replace(user)

    def login(self, username: str, password: str) -> Session:
        """Check credentials and open a new session."""
        with self._lock:
            user = self._users.get(username)
            if user is None or not user.verify_password(password):
                raise AuthError("Invalid username or password")
            user.last_login = _now()
            session = Session.create(user, self._session_hours)
            self._sessions[session.token] = session
            return replace(session)

    def validate_token(self, token: str) -> Session:
        """The session for ``token``; expired sessions are dropped."""
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                raise AuthError("Invalid or expired session")
            if session.is_expired():
                del self._sessions[token]
                raise AuthError("Session expired")
            return replace(session)

    def logout(self, token: str) -> None:
        with self._lock:
            self._sessions.pop(token, None)

    def get_user(self, username: str) -> User | None:
        with self._lock:
            user = self._users.get(username)
            return replace(user) if user is not None else None

    def list_users(self) -> list[User]:
        with self._lock:
            return [replace(u) for u in self._users.values()]

    def update_password(self, username: str, old_password: str, new_password: str) -> None:
        with self._lock:
            user = self._users.get(username)
            if user is None:
                raise AuthError("User not found")
            if not user.verify_password(old_password):
                raise AuthError("Invalid current password")
            user.password_hash = _hash_password(new_password)

    def delete_user(self, username: str) -> None:
        with self._lock:
            if self._users.pop(username, None) is None:
                raise AuthError("User not found")

    def clean_expired_sessions(self) -> None:
        with self._lock:
            self._sessions = {t: s for t, s in self._sessions.items() if not s.is_expired()}


@dataclass(frozen=True)
class LoginRequest:
    username: str
    password: str


@dataclass(frozen=True)
class LoginResponse:
    token: str
    username: str
    role: Role
    expires_at: datetime

    @classmethod
    def from_session(cls, session: Session) -> LoginResponse:
        return cls(
            token=session.token,
            username=session.username,
            role=session.role,
            expires_at=session.expires_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "token": self.token,
            "username": self.username,
            "role": self.role.value,
            "expires_at": self.expires_at.isoformat(),
        }


@dataclass(frozen=True)
class CreateUserRequest:
    username: str
    password: str
    role: Role
    email: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CreateUserRequest:
        """Build from decoded JSON; the role is given by its lowercase name."""
        return cls(
            username=data["username"],
            password=data["password"],
            role=Role(data["role"]),
            email=data.get("email"),
        )


@dataclass(frozen=True)
class ChangePasswordRequest:
    old_password: str
    new_password: str