"""Tests for the day-start setting and its cache."""

from __future__ import annotations

import pytest

from keeprun.errors import NotFound, ValidationError
from keeprun.services.user_settings import SettingsCache, UserSettingsService


class CountingUsers:
    """Wraps a user repository and counts reads."""

    def __init__(self, inner):
        self.inner = inner
        self.reads = 0

    def get_by_id(self, user_id):
        self.reads += 1
        return self.inner.get_by_id(user_id)

    def update_day_start_time(self, user_id, value):
        return self.inner.update_day_start_time(user_id, value)

    def ensure(self, *args, **kwargs):
        return self.inner.ensure(*args, **kwargs)


class RacingUsers(CountingUsers):
    """Lands a write between the first read and its return."""

    def __init__(self, inner, write):
        super().__init__(inner)
        self.write = write

    def get_by_id(self, user_id):
        user = super().get_by_id(user_id)
        if self.reads == 1:
            self.write(user_id)
        return user


@pytest.fixture
def counting_users(user_repo):
    return CountingUsers(user_repo)


class TestSettingsCache:
    def test_put_get_invalidate(self):
        cache = SettingsCache()
        cache.put("u", "06:00")
        assert cache.get("u") == "06:00"
        assert len(cache) == 1

        cache.invalidate("u")
        assert cache.get("u") is None
        cache.invalidate("missing")

    def test_clear(self):
        cache = SettingsCache()
        cache.put("a", "05:00")
        cache.put("b", "06:00")
        cache.clear()
        assert len(cache) == 0

    def test_put_with_stale_version_is_dropped(self):
        cache = SettingsCache()
        version = cache.version("u")
        cache.invalidate("u")

        assert cache.put("u", "05:00", version=version) is False
        assert cache.get("u") is None
        assert cache.put("u", "06:00", version=cache.version("u")) is True
        assert cache.get("u") == "06:00"

    def test_instances_do_not_share_entries(self):
        first, second = SettingsCache(), SettingsCache()
        first.put("u", "07:00")
        assert second.get("u") is None


class TestUserSettingsService:
    def test_read_through_cache(self, counting_users, user_id):
        service = UserSettingsService(counting_users, SettingsCache())

        assert service.get_day_start_time(user_id) == "05:00"
        assert service.get_day_start_time(user_id) == "05:00"
        assert counting_users.reads == 1

    def test_update_invalidates_cache(self, counting_users, user_id):
        cache = SettingsCache()
        service = UserSettingsService(counting_users, cache)
        service.get_day_start_time(user_id)

        assert service.update_day_start_time(user_id, "6:15") == "06:15"
        assert cache.get(user_id) is None
        assert service.get_day_start_time(user_id) == "06:15"
        assert counting_users.reads == 2

    def test_read_racing_a_write_does_not_cache_old_value(self, user_repo, user_id):
        cache = SettingsCache()
        writer = UserSettingsService(user_repo, cache)
        users = RacingUsers(user_repo, lambda uid: writer.update_day_start_time(uid, "07:30"))
        reader = UserSettingsService(users, cache)

        # The in-flight read still answers with what it loaded
        assert reader.get_day_start_time(user_id) == "05:00"
        assert cache.get(user_id) is None
        assert reader.get_day_start_time(user_id) == "07:30"
        assert users.reads == 2

    def test_invalid_time_leaves_stored_value(self, counting_users, user_id):
        service = UserSettingsService(counting_users)
        with pytest.raises(ValidationError):
            service.update_day_start_time(user_id, "25:00")
        assert service.get_day_start_time(user_id) == "05:00"

    def test_unknown_user_falls_back_to_default(self, counting_users):
        service = UserSettingsService(counting_users, default_day_start_time="4:00")
        assert service.get_day_start_time("ghost") == "04:00"

    def test_update_unknown_user(self, counting_users):
        service = UserSettingsService(counting_users)
        with pytest.raises(NotFound):
            service.update_day_start_time("ghost", "06:00")
