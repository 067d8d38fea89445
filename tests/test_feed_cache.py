from conftest import FakeClock
from services.feed_cache import FeedCache


def test_empty_cache_misses():
    cache = FeedCache(ttl_seconds=120, clock=FakeClock())
    assert cache.get() is None
    assert cache.peek() is None


def test_payload_served_within_ttl():
    clock = FakeClock()
    cache = FeedCache(ttl_seconds=120, clock=clock)
    payload = {"count": 1}
    cache.set(payload)

    clock.advance(119.9)
    assert cache.get() is payload


def test_payload_expires_at_ttl():
    clock = FakeClock()
    cache = FeedCache(ttl_seconds=120, clock=clock)
    cache.set({"count": 1})

    clock.advance(120)
    assert cache.get() is None
    assert cache.peek().payload == {"count": 1}


def test_captured_at_is_the_supplied_timestamp():
    clock = FakeClock()
    cache = FeedCache(ttl_seconds=10, clock=clock)
    started = clock()
    clock.advance(8)
    cache.set("payload", captured_at=started)

    clock.advance(2)
    assert cache.get() is None
    assert cache.peek().captured_at == started


def test_set_replaces_whole_entry():
    clock = FakeClock()
    cache = FeedCache(ttl_seconds=10, clock=clock)
    cache.set("old")
    cache.set("new")
    assert cache.get() == "new"
    assert cache.peek().payload == "new"


def test_zero_ttl_never_serves():
    cache = FeedCache(ttl_seconds=0, clock=FakeClock())
    cache.set("payload")
    assert cache.get() is None
