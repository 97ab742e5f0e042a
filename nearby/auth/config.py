from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class AuthConfig:
    secret: str = os.getenv("SESSION_SECRET", "nearby-connect-secret-change-in-production")
    session_ttl_seconds: int = 3600
    cookie_name: str = "token"
    bcrypt_rounds: int = 10


DEFAULT_AUTH_CONFIG = AuthConfig()
