from __future__ import annotations

import logging
import threading
import time
import uuid
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from core.config import Settings, settings
from domain.models import Identity

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
ALGO = "HS256"


class AuthError(Exception):
    """Identity failure carrying a stable code (``user-not-found`` etc.)."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


class RevokedTokens:
    """In-process deny-list of signed-out token ids, pruned on expiry."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, int] = {}

    def add(self, jti: str, exp: int) -> None:
        with self._lock:
            self._entries[jti] = exp
            now = int(time.time())
            for k in [k for k, e in self._entries.items() if e < now]:
                del self._entries[k]

    def __contains__(self, jti: str) -> bool:
        with self._lock:
            return jti in self._entries


class IdentityProvider:
    """
    Issues and validates session tokens.

    Two kinds of session exist: anonymous ones (handed to the public form
    on load so it may write) and the password session of the configured
    admin account.
    """

    def __init__(self, cfg: Settings):
        self.cfg = cfg
        self.revoked = RevokedTokens()

    def _issue(self, sub: str, email: str | None, anon: bool, minutes: int) -> str:
        now = int(time.time())
        payload = {
            "sub": sub,
            "email": email,
            "anon": anon,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + minutes * 60,
        }
        return jwt.encode(payload, self.cfg.SECRET_KEY, algorithm=ALGO)

    def sign_in_anonymously(self) -> str:
        uid = f"anon:{uuid.uuid4().hex}"
        logger.info("anonymous session issued uid=%s", uid)
        return self._issue(uid, None, True, self.cfg.ANON_TOKEN_EXPIRE_MIN)

    def sign_in_with_password(self, email: str, password: str) -> str:
        if not self.cfg.ADMIN_PWD_HASH:
            raise AuthError("not-configured", "server not configured: ADMIN_PWD_HASH missing")
        if email != self.cfg.ADMIN_EMAIL:
            raise AuthError("user-not-found", "no account for this email")
        if not verify_password(password, self.cfg.ADMIN_PWD_HASH):
            logger.warning("failed password sign-in for %s", email)
            raise AuthError("invalid-credential", "bad credentials")
        return self._issue(email, email, False, self.cfg.ACCESS_TOKEN_EXPIRE_MIN)

    def decode(self, token: str) -> dict[str, Any]:
        try:
            claims = jwt.decode(token, self.cfg.SECRET_KEY, algorithms=[ALGO])
        except JWTError as e:
            raise AuthError("invalid-token", "invalid or expired token") from e
        if claims.get("jti") in self.revoked:
            raise AuthError("revoked-token", "session signed out")
        return claims

    def identity(self, token: str) -> Identity:
        claims = self.decode(token)
        return Identity(
            uid=claims["sub"],
            email=claims.get("email"),
            is_anonymous=bool(claims.get("anon")),
        )

    def sign_out(self, token: str) -> None:
        claims = self.decode(token)
        self.revoked.add(claims["jti"], int(claims.get("exp", 0)))
        logger.info("session signed out uid=%s", claims.get("sub"))

    def is_admin(self, identity: Identity | None) -> bool:
        return bool(
            identity
            and not identity.is_anonymous
            and identity.email == self.cfg.ADMIN_EMAIL
        )


provider = IdentityProvider(settings)
