"""
In-process store for one-time attestation challenges.
"""

import logging
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable

from cachetools import TTLCache

logger = logging.getLogger(__name__)

# 32 random bytes -> 256 bits of entropy
CHALLENGE_BYTES = 32

# Entries outlive the TTL by this margin so a challenge exactly TTL seconds
# old is still present for the inclusive age check in redeem()
EXPIRY_GRACE_SECONDS = 1


@dataclass(frozen=True)
class Challenge:
    """A single-use nonce and the moment it was issued."""

    value: str
    issued_at: float


class ChallengeStore:
    """
    Thread-safe registry of outstanding challenges.

    A challenge can be redeemed once, and only while it is no older than the
    configured TTL. Uses cachetools.TTLCache so expired entries are dropped
    on write and the number of outstanding challenges is bounded; when the
    bound is reached the oldest outstanding challenge is evicted.
    """

    def __init__(self, ttl_seconds: int = 300, maxsize: int = 10000,
                 clock: Callable[[], float] = time.time):
        """
        Initialize challenge store.

        Args:
            ttl_seconds: How long an issued challenge stays redeemable
            maxsize: Maximum number of outstanding challenges
            clock: Source of the current time in seconds
        """
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._cache = TTLCache(maxsize=maxsize, ttl=ttl_seconds + EXPIRY_GRACE_SECONDS, timer=clock)
        self._lock = threading.RLock()

        logger.info(f"Challenge store initialized - Max size: {maxsize}, TTL: {ttl_seconds}s")

    @property
    def maxsize(self) -> int:
        return self._cache.maxsize

    def issue(self) -> Challenge:
        """Create, record and return a fresh challenge."""
        value = secrets.token_urlsafe(CHALLENGE_BYTES)
        with self._lock:
            now = self._clock()
            if len(self._cache) >= self._cache.maxsize:
                logger.warning(f"Challenge store full ({self._cache.maxsize}), evicting oldest challenge")
            self._cache[value] = now

        logger.debug(f"Challenge issued: {value[:8]}...")
        return Challenge(value=value, issued_at=now)

    def redeem(self, value: str) -> bool:
        """
        Consume a challenge.

        Returns:
            True if the challenge existed and had not expired. The entry is
            removed either way, so a second call always returns False.
        """
        if not value:
            return False

        with self._lock:
            issued_at = self._cache.pop(value, None)
            if issued_at is None:
                return False
            age = self._clock() - issued_at

        if age > self.ttl_seconds:
            logger.info(f"Challenge expired: {value[:8]}... (age {age:.0f}s)")
            return False
        return True

    def sweep(self) -> int:
        """
        Remove expired challenges.

        Returns:
            Number of entries removed
        """
        with self._lock:
            before = len(self._cache)
            self._cache.expire()
            removed = before - len(self._cache)

        if removed:
            logger.debug(f"Swept {removed} expired challenges")
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def __contains__(self, value: str) -> bool:
        with self._lock:
            return value in self._cache
