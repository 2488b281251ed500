from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from src.app.domain.errors import QuotaExceededError
from src.app.domain.models import GenerationRecord
from src.app.infra.db.base import GenerationRepository
from src.app.services.quota_service import QuotaService, start_of_utc_day


class GenerationRepositoryStub(GenerationRepository):
    def __init__(self) -> None:
        self.records: list[GenerationRecord] = []
        self.count_calls: list[tuple[str, datetime]] = []

    def count_since(self, user_id: str, since: datetime) -> int:
        self.count_calls.append((user_id, since))
        return sum(
            1 for record in self.records
            if record.user_id == user_id and record.created_at >= since
        )

    def insert(self, user_id: str, created_at: Optional[datetime] = None) -> GenerationRecord:
        record = GenerationRecord(user_id=user_id, created_at=created_at or datetime.now(timezone.utc))
        self.records.append(record)
        return record


NOW = datetime(2024, 1, 15, 18, 30, tzinfo=timezone.utc)


class TestStartOfUtcDay:
    def test_truncates_to_midnight(self) -> None:
        assert start_of_utc_day(NOW) == datetime(2024, 1, 15, tzinfo=timezone.utc)

    def test_converts_other_timezones_first(self) -> None:
        # 01:00 on the 16th in UTC+3 is still the 15th in UTC
        local = datetime(2024, 1, 16, 1, 0, tzinfo=timezone(timedelta(hours=3)))
        assert start_of_utc_day(local) == datetime(2024, 1, 15, tzinfo=timezone.utc)


class TestQuotaServiceCheckQuota:
    def test_counts_from_start_of_utc_day(self) -> None:
        repo = GenerationRepositoryStub()
        service = QuotaService(repository=repo, daily_limit=3)

        service.check_quota("user-1", now=NOW)

        assert repo.count_calls == [("user-1", datetime(2024, 1, 15, tzinfo=timezone.utc))]

    def test_allowed_under_limit(self) -> None:
        repo = GenerationRepositoryStub()
        repo.insert("user-1", NOW - timedelta(hours=1))
        service = QuotaService(repository=repo, daily_limit=3)

        result = service.check_quota("user-1", now=NOW)

        assert result.allowed is True
        assert result.used == 1
        assert result.remaining == 2
        assert result.daily_limit == 3
        assert result.reason is None

    def test_yesterday_does_not_count(self) -> None:
        repo = GenerationRepositoryStub()
        for _ in range(5):
            repo.insert("user-1", NOW - timedelta(days=1))
        service = QuotaService(repository=repo, daily_limit=3)

        result = service.check_quota("user-1", now=NOW)

        assert result.allowed is True
        assert result.used == 0

    def test_other_users_do_not_count(self) -> None:
        repo = GenerationRepositoryStub()
        for _ in range(3):
            repo.insert("someone-else", NOW)
        service = QuotaService(repository=repo, daily_limit=3)

        assert service.check_quota("user-1", now=NOW).allowed is True


class TestQuotaServiceEnforce:
    def test_raises_at_limit(self) -> None:
        repo = GenerationRepositoryStub()
        for _ in range(3):
            repo.insert("user-1", NOW)
        service = QuotaService(repository=repo, daily_limit=3)

        with pytest.raises(QuotaExceededError) as exc_info:
            service.enforce("user-1", now=NOW)

        assert exc_info.value.daily_limit == 3
        assert str(exc_info.value) == "You have reached your daily limit of 3 recipes."

    def test_remaining_never_negative(self) -> None:
        repo = GenerationRepositoryStub()
        for _ in range(7):
            repo.insert("user-1", NOW)
        service = QuotaService(repository=repo, daily_limit=3)

        result = service.check_quota("user-1", now=NOW)

        assert result.allowed is False
        assert result.remaining == 0

    def test_third_allowed_fourth_rejected(self) -> None:
        repo = GenerationRepositoryStub()
        repo.insert("user-1", NOW)
        repo.insert("user-1", NOW)
        service = QuotaService(repository=repo, daily_limit=3)

        service.enforce("user-1", now=NOW)
        service.record_generation("user-1", now=NOW)

        with pytest.raises(QuotaExceededError):
            service.enforce("user-1", now=NOW)


class TestQuotaServiceRecordGeneration:
    def test_inserts_one_record(self) -> None:
        repo = GenerationRepositoryStub()
        service = QuotaService(repository=repo)

        service.record_generation("user-1", now=NOW)

        assert repo.records == [GenerationRecord(user_id="user-1", created_at=NOW)]
