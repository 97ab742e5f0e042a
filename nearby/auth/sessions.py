"""
Stateless session tokens.

A token is an itsdangerous-signed payload ``{"sub", "iat", "exp"}``. It is
valid iff the signature verifies under the process secret and the current time
is before ``exp``; the server keeps no session table. Logging out only clears
the cookie, so a copied token stays usable until it expires.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable

from itsdangerous import BadData, URLSafeSerializer
from starlette.responses import Response

from ..errors import Forbidden, Unauthorized
from .config import DEFAULT_AUTH_CONFIG, AuthConfig

_SALT = "nearby.session"


@dataclass(frozen=True)
class Session:
    token: str
    subject_id: str
    issued_at: int
    expires_at: int


class SessionGate:
    def __init__(
        self,
        config: AuthConfig = DEFAULT_AUTH_CONFIG,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._serializer = URLSafeSerializer(config.secret, salt=_SALT)
        self._clock = clock

    @property
    def cookie_name(self) -> str:
        return self._config.cookie_name

    def cookie_params(self) -> dict[str, Any]:
        """Cookie attributes shared by issuance and revocation."""
        return {
            "key": self._config.cookie_name,
            "path": "/",
            "secure": True,
            "httponly": True,
            "samesite": "none",
        }

    def issue(self, subject_id: str) -> Session:
        now = int(self._clock())
        expires_at = now + self._config.session_ttl_seconds
        token = self._serializer.dumps({"sub": subject_id, "iat": now, "exp": expires_at})
        return Session(token=token, subject_id=subject_id, issued_at=now, expires_at=expires_at)

    def attach(self, response: Response, session: Session) -> None:
        response.set_cookie(
            value=session.token,
            max_age=self._config.session_ttl_seconds,
            **self.cookie_params(),
        )

    def verify(self, token: str | None) -> str:
        """Return the subject id bound to ``token``.

        Raises ``Unauthorized`` when no token is presented and ``Forbidden``
        when it is tampered with, malformed or expired.
        """
        if not token:
            raise Unauthorized()
        try:
            payload = self._serializer.loads(token)
        except BadData:
            raise Forbidden()

        if not isinstance(payload, dict):
            raise Forbidden()
        subject_id = payload.get("sub")
        expires_at = payload.get("exp")
        if not isinstance(subject_id, str) or not isinstance(expires_at, (int, float)):
            raise Forbidden()
        if self._clock() >= expires_at:
            raise Forbidden()
        return subject_id

    def revoke(self, response: Response) -> None:
        response.delete_cookie(**self.cookie_params())
