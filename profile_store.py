"""
Persistence for UserProfile records. Profiles are read and written whole;
`lock(user_id)` serialises read-modify-write cycles for a single profile.
"""

import contextlib
import logging
import threading
from typing import Dict, Iterator, Optional

import redis
from pydantic import ValidationError

from api.pydantic_models import UserProfile

logger = logging.getLogger(__name__)


class ProfileStoreError(Exception):
    """The underlying storage is unreachable or refused the operation."""


class ProfileStore:
    """Interface every profile backend implements."""

    def load(self, user_id: str) -> Optional[UserProfile]:
        raise NotImplementedError

    def save(self, user_id: str, profile: UserProfile) -> None:
        raise NotImplementedError

    def lock(self, user_id: str):
        raise NotImplementedError

    def ping(self) -> bool:
        return True


class InMemoryProfileStore(ProfileStore):
    """
    Process-local store. Profiles are kept as serialized JSON so every load
    returns an independent copy and no reader can observe a partial update.
    """

    def __init__(self):
        self._records: Dict[str, str] = {}
        self._records_lock = threading.Lock()
        self._profile_locks: Dict[str, threading.Lock] = {}

    def load(self, user_id: str) -> Optional[UserProfile]:
        with self._records_lock:
            raw = self._records.get(user_id)
        return UserProfile.model_validate_json(raw) if raw is not None else None

    def save(self, user_id: str, profile: UserProfile) -> None:
        raw = profile.model_dump_json()
        with self._records_lock:
            self._records[user_id] = raw

    @contextlib.contextmanager
    def lock(self, user_id: str) -> Iterator[None]:
        with self._records_lock:
            profile_lock = self._profile_locks.setdefault(user_id, threading.Lock())
        with profile_lock:
            yield


class RedisProfileStore(ProfileStore):
    """Redis-backed store; a Redis lock per profile closes the lost-update window between writers."""

    KEY_PREFIX = "ecopack:profile:"
    LOCK_PREFIX = "ecopack:profile-lock:"

    def __init__(self, client: "redis.Redis", lock_timeout: float = 10.0, blocking_timeout: float = 5.0):
        self.client = client
        self.lock_timeout = lock_timeout
        self.blocking_timeout = blocking_timeout

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisProfileStore":
        client = redis.from_url(url, decode_responses=True, socket_connect_timeout=5, socket_timeout=10)
        return cls(client, **kwargs)

    def load(self, user_id: str) -> Optional[UserProfile]:
        try:
            raw = self.client.get(self.KEY_PREFIX + user_id)
        except redis.exceptions.RedisError as e:
            raise ProfileStoreError(f"Failed to load profile {user_id}: {e}") from e
        if raw is None:
            return None
        try:
            return UserProfile.model_validate_json(raw)
        except ValidationError as e:
            raise ProfileStoreError(f"Stored profile {user_id} is corrupt: {e}") from e

    def save(self, user_id: str, profile: UserProfile) -> None:
        try:
            self.client.set(self.KEY_PREFIX + user_id, profile.model_dump_json())
        except redis.exceptions.RedisError as e:
            raise ProfileStoreError(f"Failed to save profile {user_id}: {e}") from e

    @contextlib.contextmanager
    def lock(self, user_id: str) -> Iterator[None]:
        profile_lock = self.client.lock(self.LOCK_PREFIX + user_id, timeout=self.lock_timeout,
                                        blocking_timeout=self.blocking_timeout)
        try:
            acquired = profile_lock.acquire()
        except redis.exceptions.RedisError as e:
            raise ProfileStoreError(f"Failed to lock profile {user_id}: {e}") from e
        if not acquired:
            raise ProfileStoreError(f"Timed out waiting for the lock on profile {user_id}")
        try:
            yield
        finally:
            try:
                profile_lock.release()
            except redis.exceptions.RedisError as e:
                # Expired or unreachable; the lock times out on its own either way.
                logger.warning(f"Could not release profile lock for {user_id}: {e}")

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except redis.exceptions.RedisError:
            return False
