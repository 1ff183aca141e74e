"""
Identity and session handling: sign-up, sign-in, sign-out.

Passwords are stored only as bcrypt hashes. A session is a stored row plus a
signed JWT that names it; revoking the row ends the session even if the token
has not expired yet.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Literal, Optional

import bcrypt
from jose import JWTError, jwt

from tradedesk.config import Settings
from tradedesk.db import DbClient, IdentityRecord, SessionRecord
from tradedesk.errors import AuthenticationError

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid login credentials"


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"), hashed_password.encode("utf-8")
        )
    except ValueError:
        return False


@dataclass(frozen=True)
class Caller:
    """The authenticated identity behind a request."""

    user_id: str
    session_id: str
    email: str


@dataclass(frozen=True)
class IssuedSession:
    access_token: str
    session: SessionRecord
    identity: IdentityRecord


class AuthService:
    def __init__(self, db: DbClient, settings: Settings):
        self.db = db
        self.settings = settings

    def _encode(self, identity: IdentityRecord, session: SessionRecord) -> str:
        claims = {
            "sub": identity.id,
            "sid": session.id,
            "email": identity.email,
            "iat": session.issued_at,
            "exp": session.expires_at,
        }
        return jwt.encode(
            claims, self.settings.jwt_secret_key, algorithm=self.settings.jwt_algorithm
        )

    def _decode(self, token: str) -> dict:
        try:
            return jwt.decode(
                token,
                self.settings.jwt_secret_key,
                algorithms=[self.settings.jwt_algorithm],
            )
        except JWTError as exc:
            raise AuthenticationError("Invalid or expired session") from exc

    def sign_up(
        self, email: str, password: str, metadata: Optional[dict] = None
    ) -> IdentityRecord:
        identity = self.db.create_identity(email, hash_password(password), metadata)
        logger.info("Registered user %s", identity.id)
        return identity

    def sign_in(self, email: str, password: str) -> IssuedSession:
        identity = self.db.get_identity_by_email(email)
        if identity is None or not verify_password(password, identity.password_hash):
            logger.info("Failed sign-in attempt")
            raise AuthenticationError(INVALID_CREDENTIALS)

        # Start from a clean slate: no earlier session of this identity survives.
        self.db.revoke_sessions_for_user(identity.id)
        expires_at = datetime.now(timezone.utc) + timedelta(
            minutes=self.settings.access_token_expire_minutes
        )
        session = self.db.create_session(identity.id, expires_at)
        logger.info("User %s signed in", identity.id)
        return IssuedSession(
            access_token=self._encode(identity, session),
            session=session,
            identity=identity,
        )

    def resolve(self, token: str) -> Caller:
        """Return the caller named by ``token`` or raise ``AuthenticationError``."""
        if not token:
            raise AuthenticationError("Not signed in")
        claims = self._decode(token)
        user_id = claims.get("sub")
        session_id = claims.get("sid")
        if not user_id or not session_id:
            raise AuthenticationError("Invalid or expired session")
        session = self.db.get_session(session_id)
        if session is None or session.user_id != user_id or session.is_revoked:
            raise AuthenticationError("Session has been signed out")
        return Caller(user_id=user_id, session_id=session_id, email=claims.get("email", ""))

    def sign_out(
        self, caller: Caller, scope: Literal["local", "global"] = "local"
    ) -> int:
        if scope == "global":
            revoked = self.db.revoke_sessions_for_user(caller.user_id)
        else:
            self.db.revoke_session(caller.session_id)
            revoked = 1
        logger.info("User %s signed out (%s)", caller.user_id, scope)
        return revoked
