# zenwhisper/services/user_store.py

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional

from zenwhisper.models.models import UserRecord

logger = logging.getLogger(__name__)


class DuplicateEmailError(Exception):
    """Raised when an account already exists for an email address."""


class UserStore:
    """
    In-memory user records keyed by normalized (lower-cased) email.

    Volatile like the rest of the process; swap for a database-backed
    store in deployments that need accounts to survive a restart.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.users: Dict[str, UserRecord] = {}

    @staticmethod
    def _key(email: str) -> str:
        return email.strip().lower()

    def add(self, record: UserRecord) -> UserRecord:
        key = self._key(record.email)
        with self._lock:
            if key in self.users:
                raise DuplicateEmailError(record.email)
            self.users[key] = record

        logger.info("✓ Stored user %s", record.username)
        return record

    def get_by_email(self, email: str) -> Optional[UserRecord]:
        with self._lock:
            return self.users.get(self._key(email))

    def all(self) -> List[UserRecord]:
        with self._lock:
            return list(self.users.values())
