import pytest

from localintel.core.cache import TTLCache
from localintel.resolvers.cascade import Attempt, CascadingResolver, ResolutionExhausted, Strategy


class RecordingStrategy(Strategy):
    def __init__(self, name, result=None, error=None, applies=True, key=None, ttl=60):
        self.name = name
        self.result = result
        self.error = error
        self._applies = applies
        self.key = key
        self.ttl = ttl
        self.calls = 0

    def applies(self, signals):
        return self._applies

    def cache_key(self, signals):
        return self.key

    def lookup(self, signals):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


def test_attempt_values():
    assert Attempt.success([1]).ok
    failed = Attempt.failed("empty result")
    assert not failed.ok
    assert failed.value is None


def test_strategy_attempt_turns_errors_and_empties_into_failures():
    assert not RecordingStrategy("boom", error=RuntimeError("down")).attempt(None).ok
    assert not RecordingStrategy("empty", result=[]).attempt(None).ok
    assert not RecordingStrategy("none", result=None).attempt(None).ok
    assert RecordingStrategy("fine", result=["x"]).attempt(None).value == ["x"]


def test_first_success_short_circuits():
    first = RecordingStrategy("first", result=["a"], key="first|k")
    second = RecordingStrategy("second", result=["b"])
    fallback = RecordingStrategy("fallback", result=["z"])
    cache = TTLCache()

    resolution = CascadingResolver([first, second], cache, fallback).resolve("signals")

    assert resolution.value == ["a"]
    assert resolution.strategy == "first"
    assert second.calls == 0
    assert fallback.calls == 0
    assert cache.get("first|k") == ["a"]


def test_skips_and_failures_are_recorded_in_order():
    skipped = RecordingStrategy("skipped", result=["s"], applies=False)
    broken = RecordingStrategy("broken", error=TimeoutError("slow"))
    empty = RecordingStrategy("empty", result=[])
    good = RecordingStrategy("good", result=["g"])

    resolution = CascadingResolver([skipped, broken, empty, good], TTLCache(), RecordingStrategy("fb")).resolve(None)

    assert resolution.strategy == "good"
    assert [(r.strategy, r.outcome) for r in resolution.attempts] == [
        ("skipped", "skipped"),
        ("broken", "failed"),
        ("empty", "failed"),
        ("good", "ok"),
    ]
    assert skipped.calls == 0


def test_cache_hit_avoids_lookup():
    cache = TTLCache()
    cache.set("live|k", ["cached"])
    live = RecordingStrategy("live", result=["fresh"], key="live|k")

    resolution = CascadingResolver([live], cache, RecordingStrategy("fb")).resolve(None)

    assert resolution.value == ["cached"]
    assert resolution.attempts[0].outcome == "cached"
    assert live.calls == 0


def test_resolve_live_raises_when_exhausted():
    resolver = CascadingResolver([RecordingStrategy("a", result=[])], TTLCache(), RecordingStrategy("fb", result=["z"]))

    with pytest.raises(ResolutionExhausted) as excinfo:
        resolver.resolve_live(None)
    assert [r.outcome for r in excinfo.value.attempts] == ["failed"]


def test_fallback_result_is_cached_with_its_ttl():
    clock_now = [0.0]
    cache = TTLCache(clock=lambda: clock_now[0])
    fallback = RecordingStrategy("synthetic", result=["z"], key="fb|k", ttl=30)
    resolver = CascadingResolver([RecordingStrategy("a", error=RuntimeError())], cache, fallback)

    assert resolver.resolve(None).value == ["z"]
    assert resolver.resolve(None).attempts[-1].outcome == "cached"
    assert fallback.calls == 1

    clock_now[0] = 31
    resolver.resolve(None)
    assert fallback.calls == 2


def test_on_value_hook_runs_on_live_and_cached_values():
    cache = TTLCache()
    live = RecordingStrategy("live", result="value", key="k")
    resolver = CascadingResolver([live], cache, RecordingStrategy("fb"), on_value=lambda value, signals: value.upper())

    assert resolver.resolve(None).value == "VALUE"
    assert resolver.resolve(None).value == "VALUE"
    assert cache.get("k") == "value"


def test_value_emptied_by_on_value_falls_through_but_stays_cached():
    cache = TTLCache()
    first = RecordingStrategy("first", result=["seed"], key="first|k")
    second = RecordingStrategy("second", result=["other"], key="second|k")
    resolver = CascadingResolver(
        [first, second],
        cache,
        RecordingStrategy("fb"),
        on_value=lambda value, signals: [item for item in value if item != "seed"],
    )

    resolution = resolver.resolve(None)

    assert resolution.strategy == "second"
    assert resolution.value == ["other"]
    assert [(record.strategy, record.outcome) for record in resolution.attempts] == [("first", "failed"), ("second", "ok")]
    assert cache.get("first|k") == ["seed"]
