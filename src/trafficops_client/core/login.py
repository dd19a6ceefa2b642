"""Login request variants."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Literal


@dataclass(slots=True, frozen=True)
class TokenLogin:
    token: str = field(repr=False)

    kind: ClassVar[Literal["token"]] = "token"
    path: ClassVar[str] = "user/login/token"

    def to_payload(self) -> dict[str, str]:
        return {"t": self.token}


@dataclass(slots=True, frozen=True)
class OAuthLogin:
    auth_code_token_url: str
    code: str = field(repr=False)
    client_id: str
    redirect_uri: str

    kind: ClassVar[Literal["oauth"]] = "oauth"
    path: ClassVar[str] = "user/login/oauth"

    def to_payload(self) -> dict[str, str]:
        return {
            "authCodeTokenUrl": self.auth_code_token_url,
            "code": self.code,
            "clientId": self.client_id,
            "redirectUri": self.redirect_uri,
        }


@dataclass(slots=True, frozen=True)
class PasswordLogin:
    username: str
    password: str = field(repr=False)

    kind: ClassVar[Literal["password"]] = "password"
    path: ClassVar[str] = "user/login"

    def to_payload(self) -> dict[str, str]:
        return {"u": self.username, "p": self.password}


LoginRequest = TokenLogin | OAuthLogin | PasswordLogin


__all__ = [
    "TokenLogin",
    "OAuthLogin",
    "PasswordLogin",
    "LoginRequest",
]
