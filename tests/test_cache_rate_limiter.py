import fnmatch

import pytest

from halo_optom import cache as cache_module
from halo_optom import rate_limiter
from halo_optom.cache import Cache, build_pricing_list_key, build_pricing_lookup_key, cached
from halo_optom.rate_limiter import check_rate_limit, reset_rate_limits
from halo_optom.redis_client import get_redis_client


class FakeRedis:
    """In-memory stand-in for the handful of redis commands used here"""

    def __init__(self):
        self.store = {}
        self.ttls = {}
        self.scans = 0

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value
        self.ttls[key] = ttl

    def set(self, key, value, ex=None):
        self.store[key] = str(value)
        self.ttls[key] = ex

    def ttl(self, key):
        return self.ttls.get(key, -2)

    def delete(self, *keys):
        removed = 0
        for key in keys:
            removed += self.store.pop(key, None) is not None
        return removed

    def scan_iter(self, match="*", count=None):
        self.scans += 1
        return iter([k for k in list(self.store) if fnmatch.fnmatch(k, match)])


class BrokenRedis(FakeRedis):
    def get(self, key):
        raise ConnectionError("redis went away")


@pytest.fixture(autouse=True)
def clean_windows():
    reset_rate_limits()
    yield
    reset_rate_limits()


# ----------------------------------------------------------------------
# Cache
# ----------------------------------------------------------------------


def test_cache_round_trips_json():
    fake = FakeRedis()
    cache = Cache(client_factory=lambda: fake)

    assert cache.set("service_pricing:list", [{"id": "a", "base_price": 1.5}], ttl=30)
    assert cache.get("service_pricing:list") == [{"id": "a", "base_price": 1.5}]
    assert fake.ttls["service_pricing:list"] == 30
    assert cache.get("missing") is None


def test_delete_pattern():
    fake = FakeRedis()
    cache = Cache(client_factory=lambda: fake)
    cache.set(build_pricing_list_key(), [], ttl=60)
    cache.set(build_pricing_lookup_key("online", "chat"), {}, ttl=60)
    cache.set("analytics:stats", {}, ttl=60)

    assert cache.delete_pattern("service_pricing:*") == 2
    assert list(fake.store) == ["analytics:stats"]


def test_delete_pattern_in_batches(monkeypatch):
    monkeypatch.setattr(cache_module, "DELETE_BATCH_SIZE", 2)
    fake = FakeRedis()
    cache = Cache(client_factory=lambda: fake)
    for n in range(5):
        cache.set(build_pricing_lookup_key("online", f"m{n}"), {}, ttl=60)

    assert cache.delete_pattern("service_pricing:*") == 5
    assert fake.store == {}
    assert fake.scans == 1


def test_get_or_load_skips_none():
    fake = FakeRedis()
    cache = Cache(client_factory=lambda: fake)
    calls = []

    def loader():
        calls.append(1)
        return {"base_price": 50000}

    assert cache.get_or_load("k", loader, ttl=60) == {"base_price": 50000}
    assert cache.get_or_load("k", loader, ttl=60) == {"base_price": 50000}
    assert len(calls) == 1

    assert cache.get_or_load("none", lambda: None, ttl=60) is None
    assert "none" not in fake.store


def test_cached_decorator_keys_by_arguments(monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(cache_module, "cache", Cache(client_factory=lambda: fake))
    calls = []

    @cached(lambda method: build_pricing_lookup_key("online", method), ttl=30)
    def lookup(method):
        calls.append(method)
        return {"method": method}

    assert lookup("chat") == {"method": "chat"}
    assert lookup("chat") == {"method": "chat"}
    assert lookup("video") == {"method": "video"}
    assert calls == ["chat", "video"]
    assert fake.ttls["service_pricing:lookup:online:chat"] == 30


def test_unavailable_redis_is_a_miss():
    def unavailable():
        raise RuntimeError("Redis is disabled")

    cache = Cache(client_factory=unavailable)
    assert cache.get("k") is None
    assert cache.set("k", 1, ttl=60) is False
    assert cache.delete_pattern("*") == 0


def test_redis_errors_are_misses():
    cache = Cache(client_factory=BrokenRedis)
    assert cache.get("k") is None


def test_pricing_keys():
    assert build_pricing_lookup_key("homecare", None) == "service_pricing:lookup:homecare:none"
    assert build_pricing_lookup_key("online", "video") == "service_pricing:lookup:online:video"


def test_disabled_redis_raises():
    with pytest.raises(RuntimeError):
        get_redis_client()


# ----------------------------------------------------------------------
# Rate limiting
# ----------------------------------------------------------------------


def test_fixed_window_in_memory():
    results = [check_rate_limit("login:1.2.3.4", limit=3, window_seconds=60) for _ in range(4)]

    assert [allowed for allowed, _, _ in results] == [True, True, True, False]
    assert results[-1][1] == 3
    assert 0 < results[-1][2] <= 60


def test_window_resets(monkeypatch):
    now = [1_000_000]
    monkeypatch.setattr(rate_limiter.time, "time", lambda: now[0])

    assert check_rate_limit("k", limit=1, window_seconds=10)[0]
    assert not check_rate_limit("k", limit=1, window_seconds=10)[0]

    now[0] += 10
    assert check_rate_limit("k", limit=1, window_seconds=10)[0]


def test_window_seeded_from_redis_and_synced():
    fake = FakeRedis()
    fake.set("login:5.6.7.8", 4, ex=30)

    allowed, count, ttl = check_rate_limit("login:5.6.7.8", limit=5, window_seconds=60, client=fake)
    assert allowed
    assert count == 5
    assert ttl == 30

    assert not check_rate_limit("login:5.6.7.8", limit=5, window_seconds=60, client=fake)[0]


def test_redis_failure_falls_back_to_memory():
    allowed, count, _ = check_rate_limit("k2", limit=2, window_seconds=60, client=BrokenRedis())
    assert allowed
    assert count == 1


def test_keys_are_independent():
    assert check_rate_limit("a", limit=1, window_seconds=60)[0]
    assert check_rate_limit("b", limit=1, window_seconds=60)[0]
    assert not check_rate_limit("a", limit=1, window_seconds=60)[0]
