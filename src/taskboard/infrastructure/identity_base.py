from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

from src.taskboard.domain.exceptions import IdentityError
from src.taskboard.domain.models import Identity
from src.taskboard.domain.repositories import IdentityListener
from src.taskboard.infrastructure.credentials import check_new_password, normalize_email
from src.taskboard.infrastructure.security import DEFAULT_ITERATIONS, hash_password, verify_password

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password."
EMAIL_IN_USE = "The email address is already in use by another account."


class UserRecord:
    __slots__ = ("uid", "email", "password_hash")

    def __init__(self, uid: str, email: str, password_hash: str) -> None:
        self.uid = uid
        self.email = email
        self.password_hash = password_hash


class BaseIdentityProvider(ABC):
    """
    Email/password identity shared by the concrete providers.

    Subclasses only look users up and register them; validation, hashing,
    the current identity and listener fan-out live here.
    """

    def __init__(self, *, hash_iterations: int = DEFAULT_ITERATIONS) -> None:
        self._hash_iterations = hash_iterations
        self._current: Identity | None = None
        self._loading = True
        self._listeners: list[IdentityListener] = []

    @property
    def current(self) -> Identity | None:
        return self._current

    @property
    def loading(self) -> bool:
        return self._loading

    async def restore(self) -> Identity | None:
        self._loading = False
        self._emit()
        return self._current

    async def sign_in(self, email: str, password: str) -> Identity:
        normalized = normalize_email(email)
        record = await self._find_user(normalized)
        if record is None or not verify_password(password, record.password_hash):
            raise IdentityError(INVALID_CREDENTIALS)
        return self._set_current(Identity(uid=record.uid, email=record.email))

    async def sign_up(self, email: str, password: str) -> Identity:
        normalized = normalize_email(email)
        check_new_password(password)
        if await self._find_user(normalized) is not None:
            raise IdentityError(EMAIL_IN_USE)
        password_hash = hash_password(password, iterations=self._hash_iterations)
        record = await self._create_user(normalized, password_hash)
        logger.info("Registered user", extra={"uid": record.uid})
        return self._set_current(Identity(uid=record.uid, email=record.email))

    async def sign_out(self) -> None:
        if self._current is None:
            return
        self._current = None
        self._emit()

    def add_listener(self, listener: IdentityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    @abstractmethod
    async def _find_user(self, email: str) -> UserRecord | None:
        """Look up a stored account by normalized email."""

    @abstractmethod
    async def _create_user(self, email: str, password_hash: str) -> UserRecord:
        """Persist a new account and return it."""

    def _set_current(self, identity: Identity) -> Identity:
        self._current = identity
        self._emit()
        return identity

    def _emit(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._current)
            except Exception:
                logger.exception("Identity listener failed")
