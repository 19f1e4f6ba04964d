import time

from apps.api.cache import clear, get_or_set, purge_expired


def test_cache_ttl():
    clear()
    counter = {"n": 0}

    def compute():
        counter["n"] += 1
        return counter["n"]

    first = get_or_set("key", 1, compute)
    second = get_or_set("key", 1, compute)
    assert first == second == 1

    time.sleep(1.1)
    third = get_or_set("key", 1, compute)
    assert third == 2


def test_failed_compute_is_not_cached():
    clear()
    calls = {"n": 0}

    def flaky():
        calls["n"] += 1
        if calls["n"] == 1:
            raise RuntimeError("upstream down")
        return "ok"

    try:
        get_or_set("flaky", 5, flaky)
    except RuntimeError:
        pass
    assert get_or_set("flaky", 5, flaky) == "ok"


def test_purge_expired():
    clear()
    get_or_set("stale", 0, lambda: 1)
    get_or_set("fresh", 60, lambda: 2)
    assert purge_expired() == 1
    assert get_or_set("fresh", 60, lambda: 3) == 2
