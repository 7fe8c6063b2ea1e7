from __future__ import annotations

import logging
from typing import Optional, Protocol, runtime_checkable

from surveyflow.core.config import AdminSettings
from surveyflow.models.response import User
from surveyflow.services.storage import SESSION_USER_KEY, StoragePort

logger = logging.getLogger(__name__)


@runtime_checkable
class Authenticator(Protocol):
    """Abstraction over whatever proves who the operator is."""

    def authenticate(self) -> User:
        """Return the signed-in operator."""


class StubAuthenticator(Authenticator):
    """Signs in the configured operator without checking any credentials."""

    def __init__(self, admin: AdminSettings) -> None:
        self._admin = admin

    def authenticate(self) -> User:
        return User(id="1", name=self._admin.name, email=self._admin.email, picture=self._admin.picture)


class SessionStore:
    """Remembers the signed-in operator in storage."""

    def __init__(self, storage: StoragePort) -> None:
        self._storage = storage

    def login(self, authenticator: Authenticator) -> User:
        user = authenticator.authenticate()
        self._storage.set(SESSION_USER_KEY, user.model_dump(mode="json"))
        logger.info("Operator %s signed in", user.email)
        return user

    def current_user(self) -> Optional[User]:
        raw_user = self._storage.get(SESSION_USER_KEY)
        if raw_user is None:
            return None
        return User.model_validate(raw_user)

    def logout(self) -> None:
        self._storage.remove(SESSION_USER_KEY)


__all__ = ["Authenticator", "SessionStore", "StubAuthenticator"]
