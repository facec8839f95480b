import socket
import threading

import pytest

from .._internal.crawl_item import Drop
from .._internal.crawl_item import RESOLUTION_FAILED
from .._internal.resolver_cache import Resolution
from .._internal.resolver_cache import ResolverCache

class FakeResolver:
    def __init__(self, answers=None):
        self.answers = answers or {}
        self.calls = []
        self._lock = threading.Lock()

    def __call__(self, host):
        with self._lock:
            self.calls.append(host)
        if host not in self.answers:
            raise socket.gaierror(socket.EAI_NONAME, "Name or service not known")
        return self.answers[host]

class TestResolverCache:
    def test_default_capacity(self):
        assert ResolverCache().capacity == 500

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            ResolverCache(0)

    def test_get_missing(self):
        assert ResolverCache().get("example.com") is None

    def test_evicts_least_recently_used(self):
        cache = ResolverCache(3)
        for i in range(3):
            cache.put(f"host{i}", f"10.0.0.{i}")
        cache.put("host3", "10.0.0.3")

        assert len(cache) == 3
        assert "host0" not in cache
        assert cache.hosts() == ["host1", "host2", "host3"]

    def test_read_protects_from_eviction(self):
        cache = ResolverCache(3)
        for i in range(3):
            cache.put(f"host{i}", f"10.0.0.{i}")
        assert cache.get("host0") == "10.0.0.0"
        cache.put("host3", "10.0.0.3")

        assert "host0" in cache
        assert "host1" not in cache
        assert len(cache) == 3

    def test_contains_does_not_touch(self):
        cache = ResolverCache(2)
        cache.put("host0", "10.0.0.0")
        cache.put("host1", "10.0.0.1")
        assert "host0" in cache
        cache.put("host2", "10.0.0.2")
        assert "host0" not in cache

    def test_put_existing_does_not_grow(self):
        cache = ResolverCache(2)
        cache.put("host0", "10.0.0.0")
        cache.put("host0", "10.0.0.9")
        assert len(cache) == 1
        assert cache.get("host0") == "10.0.0.9"

    def test_get_or_resolve_miss_then_hit(self):
        resolver = FakeResolver({"www.example.com": "93.184.216.34"})
        cache = ResolverCache()

        first = cache.get_or_resolve("www.example.com", resolver)
        second = cache.get_or_resolve("www.example.com", resolver)

        assert first == Resolution("93.184.216.34", False)
        assert second == Resolution("93.184.216.34", True)
        assert resolver.calls == ["www.example.com"]

    def test_get_or_resolve_failure(self):
        resolver = FakeResolver()
        cache = ResolverCache()

        result = cache.get_or_resolve("nowhere.invalid", resolver)

        assert result == Drop(RESOLUTION_FAILED)
        assert len(cache) == 0
        # Failures are not cached: the next call asks again.
        cache.get_or_resolve("nowhere.invalid", resolver)
        assert resolver.calls == ["nowhere.invalid", "nowhere.invalid"]

    def test_get_or_resolve_idna_error(self):
        def resolver(host):
            raise UnicodeError("label too long")

        assert ResolverCache().get_or_resolve("x" * 100, resolver) == Drop(RESOLUTION_FAILED)

    def test_get_or_resolve_empty_answer(self):
        cache = ResolverCache()
        assert cache.get_or_resolve("example.com", lambda host: None) == Drop(RESOLUTION_FAILED)
        assert len(cache) == 0

    def test_concurrent_access_keeps_bound(self):
        capacity = 50
        cache = ResolverCache(capacity)
        answers = {f"host{i}.example.com": f"10.0.{i // 256}.{i % 256}"
                   for i in range(400)}
        resolver = FakeResolver(answers)
        hosts = list(answers.keys())
        errors = []

        def worker(offset):
            try:
                for i in range(len(hosts)):
                    host = hosts[(i * 7 + offset) % len(hosts)]
                    result = cache.get_or_resolve(host, resolver)
                    assert result.ip == answers[host]
                    assert len(cache) <= capacity
            except AssertionError as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(cache) == capacity
        assert len(set(cache.hosts())) == capacity
