from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass

import bcrypt

from ..errors import DuplicateEmail, InvalidCredentials, ValidationError
from .config import DEFAULT_AUTH_CONFIG, AuthConfig

logger = logging.getLogger(__name__)

_BCRYPT_MAX_BYTES = 72


@dataclass(frozen=True)
class Account:
    id: str
    email: str
    password_hash: str


def normalize_email(email: str) -> str:
    return email.strip().lower()


class CredentialStore:
    """In-process account table keyed by normalized email."""

    def __init__(self, config: AuthConfig = DEFAULT_AUTH_CONFIG) -> None:
        self._rounds = config.bcrypt_rounds
        self._accounts: dict[str, Account] = {}
        self._lock = threading.Lock()
        # Compared against when the email is unknown so both login failures cost one bcrypt check.
        self._dummy_hash = self._hash_password(uuid.uuid4().hex)

    def _hash_password(self, plain: str) -> str:
        return bcrypt.hashpw(plain.encode(), bcrypt.gensalt(rounds=self._rounds)).decode()

    @staticmethod
    def _verify_password(plain: str, hashed: str) -> bool:
        encoded = plain.encode()
        # Over-long input still pays for a full comparison before it is rejected.
        matched = bcrypt.checkpw(encoded[:_BCRYPT_MAX_BYTES], hashed.encode())
        return matched and len(encoded) <= _BCRYPT_MAX_BYTES

    def register(self, email: str, password: str) -> Account:
        """Create an account. Raises ``DuplicateEmail`` if the email is taken."""
        key = normalize_email(email or "")
        if not key or not password:
            raise ValidationError()
        if len(password.encode()) > _BCRYPT_MAX_BYTES:
            raise ValidationError("Password must be at most 72 bytes")

        if key in self._accounts:
            raise DuplicateEmail()

        # Hash outside the lock; only the check-and-insert is serialized.
        account = Account(id=uuid.uuid4().hex, email=key, password_hash=self._hash_password(password))
        with self._lock:
            if key in self._accounts:
                raise DuplicateEmail()
            self._accounts[key] = account

        logger.info("Registered account %s", key)
        return account

    def login(self, email: str, password: str) -> Account:
        """Return the matching account or raise ``InvalidCredentials``.

        Empty fields raise ``ValidationError`` before any lookup.
        """
        key = normalize_email(email or "")
        if not key or not password:
            raise ValidationError()
        account = self._accounts.get(key)
        if account is None:
            self._verify_password(password, self._dummy_hash)
            raise InvalidCredentials()
        if not self._verify_password(password, account.password_hash):
            raise InvalidCredentials()
        return account

    def clear(self) -> None:
        with self._lock:
            self._accounts.clear()

    def __len__(self) -> int:
        return len(self._accounts)
