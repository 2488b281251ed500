# src/app/services/quota_service.py
"""
Quota management service.
Handles the daily limit on recipe generations.

The limit is enforced with a count-then-insert pair, not an atomic
reservation: two concurrent requests from the same user can both see a
count under the limit and both succeed.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from src.app.domain.errors import QuotaExceededError
from src.app.domain.models import QuotaCheck
from src.app.infra.db.base import GenerationRepository

logger = logging.getLogger(__name__)

DEFAULT_DAILY_LIMIT = 3


def start_of_utc_day(now: Optional[datetime] = None) -> datetime:
    """Midnight UTC of the day containing `now`."""
    current = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return current.replace(hour=0, minute=0, second=0, microsecond=0)


class QuotaService:
    """
    Service for managing generation quotas.

    Responsibilities:
    - Check whether a user may generate another recipe today
    - Record a completed generation
    - Provide usage statistics
    """

    def __init__(
        self,
        repository: GenerationRepository,
        daily_limit: int = DEFAULT_DAILY_LIMIT,
    ):
        self._repo = repository
        self.daily_limit = daily_limit

    def check_quota(self, user_id: str, now: Optional[datetime] = None) -> QuotaCheck:
        """
        Count today's generations for the user.

        Args:
            user_id: The user to check
            now: Current time (for testing)

        Returns:
            QuotaCheck with result
        """
        used = self._repo.count_since(user_id, start_of_utc_day(now))
        allowed = used < self.daily_limit
        return QuotaCheck(
            allowed=allowed,
            used=used,
            remaining=max(0, self.daily_limit - used),
            daily_limit=self.daily_limit,
            reason=None if allowed else f"You have reached your daily limit of {self.daily_limit} recipes.",
        )

    def enforce(self, user_id: str, now: Optional[datetime] = None) -> QuotaCheck:
        """
        Same as check_quota, but raises when the limit is reached.

        Raises:
            QuotaExceededError: If today's count is at or above the limit
        """
        result = self.check_quota(user_id, now)

        if not result.allowed:
            logger.warning("Daily quota reached: user=%s, used=%d", user_id, result.used)
            raise QuotaExceededError(daily_limit=self.daily_limit, message=result.reason)

        return result

    def record_generation(self, user_id: str, now: Optional[datetime] = None) -> None:
        """Log one completed generation against today's quota."""
        self._repo.insert(user_id, now)
        logger.info("Generation recorded: user=%s", user_id)
