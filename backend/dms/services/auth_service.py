import logging
import time
from dataclasses import dataclass

from sqlalchemy import func, text
from sqlalchemy.orm import Session

from dms.config import settings
from dms.exceptions import AuthenticationError, ThrottledError
from dms.models.user import User
from dms.utils.security import generate_token, verify_password
from dms.utils.time import utc_now

logger = logging.getLogger("dms.auth")


@dataclass
class SessionEntry:
    user_id: str
    expires_at: float


class AuthService:
    def __init__(self):
        self._sessions: dict[str, SessionEntry] = {}

    def _cleanup_expired(self):
        now = time.time()
        self._sessions = {
            t: entry for t, entry in self._sessions.items() if entry.expires_at > now
        }

    def login(self, db: Session, email: str, password: str, throttle_key: str = "login") -> dict:
        delay = self._get_throttle_delay(db, throttle_key)
        if delay > 0:
            raise ThrottledError(delay)

        user = db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()
        if not user or not verify_password(user.password_hash, password):
            self._record_failed_attempt(db, throttle_key)
            logger.warning("Failed login for %s from %s", email, throttle_key)
            raise AuthenticationError("Invalid email or password")
        if not user.active:
            raise AuthenticationError("Account is deactivated")

        self._reset_failed_attempts(db, throttle_key)
        user.last_login_at = utc_now()
        db.commit()

        token = generate_token()
        ttl = settings.session_ttl_seconds
        self._sessions[token] = SessionEntry(user_id=user.id, expires_at=time.time() + ttl)
        return {"token": token, "expires_in_seconds": ttl, "user": user}

    def logout(self, token: str):
        self._sessions.pop(token, None)

    def revoke_user(self, user_id: str):
        self._sessions = {
            t: entry for t, entry in self._sessions.items() if entry.user_id != user_id
        }

    def resolve(self, token: str) -> str | None:
        """Return the user id behind a live token and slide its expiry."""
        self._cleanup_expired()
        entry = self._sessions.get(token)
        if entry is None:
            return None
        entry.expires_at = time.time() + settings.session_ttl_seconds
        return entry.user_id

    def reset(self):
        self._sessions.clear()

    def _get_throttle_delay(self, db: Session, key: str) -> float:
        row = db.execute(
            text("SELECT failed_attempts, last_failed_at FROM auth_throttle WHERE key = :key"),
            {"key": key},
        ).fetchone()
        if not row:
            return 0
        failed_attempts = int(row[0])
        last_failed_at = float(row[1])

        if failed_attempts < 3:
            return 0
        if failed_attempts < 5:
            delay = 5.0
        elif failed_attempts < 10:
            delay = 30.0
        else:
            delay = 300.0
        elapsed = time.time() - last_failed_at
        remaining = delay - elapsed
        return max(0, remaining)

    def _record_failed_attempt(self, db: Session, key: str):
        now = time.time()
        db.execute(
            text(
                """
                INSERT INTO auth_throttle (key, failed_attempts, last_failed_at)
                VALUES (:key, 1, :now)
                ON CONFLICT(key) DO UPDATE SET
                    failed_attempts = failed_attempts + 1,
                    last_failed_at = :now
                """
            ),
            {"key": key, "now": now},
        )
        db.commit()

    def _reset_failed_attempts(self, db: Session, key: str):
        db.execute(
            text(
                """
                INSERT INTO auth_throttle (key, failed_attempts, last_failed_at)
                VALUES (:key, 0, :now)
                ON CONFLICT(key) DO UPDATE SET
                    failed_attempts = 0,
                    last_failed_at = :now
                """
            ),
            {"key": key, "now": time.time()},
        )
        db.commit()


auth_service = AuthService()
