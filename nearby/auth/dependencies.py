from __future__ import annotations

from fastapi import Request

from .sessions import SessionGate


def require_user(gate: SessionGate):
    """Build a dependency that returns the verified subject id.

    Raises ``Unauthorized`` (401) without a session cookie and ``Forbidden``
    (403) when the cookie does not verify.
    """

    def _require_user(request: Request) -> str:
        return gate.verify(request.cookies.get(gate.cookie_name))

    return _require_user
