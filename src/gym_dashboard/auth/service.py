from __future__ import annotations

import logging
from typing import Optional

from werkzeug.security import check_password_hash

from ..core.exceptions import AuthenticationError
from .model import SessionOwner
from .repository import OwnerRepository

logger = logging.getLogger(__name__)


class AuthService:
    """Use case: authenticate an owner (login)."""

    def __init__(self, owners: OwnerRepository):
        self._owners = owners

    def authenticate(self, username: str, password: str) -> SessionOwner:
        owner = self._owners.get_by_username((username or "").strip())
        if not owner or not owner.is_active:
            logger.info("Login rejected for username=%r", username)
            raise AuthenticationError("invalid username or password")

        try:
            ok = check_password_hash(owner.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            logger.info("Login rejected for username=%r", username)
            raise AuthenticationError("invalid username or password")

        logger.info("Owner %s logged in", owner.owner_id)
        return SessionOwner(owner_id=owner.owner_id, username=owner.username, full_name=owner.full_name)

    def get_session_owner(self, owner_id: int) -> Optional[SessionOwner]:
        owner = self._owners.get_by_id(owner_id)
        if not owner or not owner.is_active:
            return None
        return SessionOwner(owner_id=owner.owner_id, username=owner.username, full_name=owner.full_name)
