from __future__ import annotations

from pydantic import BaseModel, Field


class CredentialsRequest(BaseModel):
    # Missing fields are rejected by the credential store with a 400.
    email: str = Field(default="", max_length=320)
    password: str = Field(default="", max_length=128)
