"""Ordered-strategy resolution with caching and a synthetic fallback.

A resolver holds a fixed list of live strategies plus one fallback. For each
request it walks the strategies in order: strategies whose preconditions do
not hold are skipped, a fresh cache entry under the strategy's key counts as
success, otherwise the strategy's lookup runs. The first successful attempt
is cached for the strategy's TTL and returned. When every live strategy has
failed the fallback is invoked; its output is cached as well.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, List, Optional, Sequence, TypeVar

from localintel.core.cache import DEFAULT_TTL_SECONDS, TTLCache

logger = logging.getLogger(__name__)

T = TypeVar("T")
S = TypeVar("S")


class LookupFailure(RuntimeError):
    """A strategy could not produce a usable result."""


class ResolutionExhausted(RuntimeError):
    """Every live strategy was skipped or failed."""

    def __init__(self, label: str, attempts: Sequence["AttemptRecord"]) -> None:
        super().__init__(f"{label}: all live strategies exhausted")
        self.attempts = list(attempts)


@dataclass(frozen=True)
class Attempt(Generic[T]):
    value: Optional[T] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.reason is None

    @classmethod
    def success(cls, value: T) -> "Attempt[T]":
        return cls(value=value)

    @classmethod
    def failed(cls, reason: str) -> "Attempt[T]":
        return cls(reason=reason)


@dataclass(frozen=True)
class AttemptRecord:
    strategy: str
    outcome: str  # ok | cached | skipped | failed
    detail: Optional[str] = None


@dataclass
class Resolution(Generic[T]):
    value: T
    strategy: str
    attempts: List[AttemptRecord] = field(default_factory=list)


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple, dict, str)):
        return len(value) == 0
    return False


class Strategy(Generic[S, T]):
    """One way of turning signals into a value."""

    name = "strategy"
    ttl: float = DEFAULT_TTL_SECONDS

    def applies(self, signals: S) -> bool:
        return True

    def cache_key(self, signals: S) -> Optional[str]:
        return None

    def lookup(self, signals: S) -> Optional[T]:
        raise NotImplementedError

    def attempt(self, signals: S) -> Attempt[T]:
        try:
            value = self.lookup(signals)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Strategy %s failed: %s", self.name, exc)
            return Attempt.failed(f"{type(exc).__name__}: {exc}")
        if _is_empty(value):
            return Attempt.failed("empty result")
        return Attempt.success(value)


class CascadingResolver(Generic[S, T]):
    def __init__(
        self,
        strategies: Sequence[Strategy],
        cache: TTLCache,
        fallback: Strategy,
        label: str = "resolver",
        on_value: Optional[Callable[[T, S], T]] = None,
    ) -> None:
        self.strategies = list(strategies)
        self.cache = cache
        self.fallback = fallback
        self.label = label
        self._on_value = on_value

    def _finish(self, value: T, signals: S) -> T:
        return self._on_value(value, signals) if self._on_value else value

    def resolve_live(self, signals: S, attempts: Optional[List[AttemptRecord]] = None) -> Resolution[T]:
        """Walk the live strategies; raise ResolutionExhausted if none produced a value.

        The cache holds raw strategy output. ``on_value`` runs after every cache
        read or lookup, and a value it empties counts as a failed strategy.
        """
        attempts = attempts if attempts is not None else []
        for strategy in self.strategies:
            if not strategy.applies(signals):
                attempts.append(AttemptRecord(strategy.name, "skipped"))
                continue

            key = strategy.cache_key(signals)
            value = None
            outcome = "ok"
            if key is not None and not self.cache.is_expired(key):
                value = self.cache.get(key)
                if value is not None:
                    outcome = "cached"
                    logger.info("%s: cache hit for %s via %s", self.label, key, strategy.name)

            if value is None:
                result = strategy.attempt(signals)
                if not result.ok:
                    attempts.append(AttemptRecord(strategy.name, "failed", result.reason))
                    continue
                value = result.value
                if key is not None:
                    self.cache.set(key, value, strategy.ttl)

            finished = self._finish(value, signals)
            if _is_empty(finished):
                attempts.append(AttemptRecord(strategy.name, "failed", "empty after post-processing"))
                continue
            attempts.append(AttemptRecord(strategy.name, outcome, key))
            logger.info("%s: resolved via %s (%s)", self.label, strategy.name, outcome)
            return Resolution(finished, strategy.name, attempts)

        raise ResolutionExhausted(self.label, attempts)

    def resolve(self, signals: S) -> Resolution[T]:
        attempts: List[AttemptRecord] = []
        try:
            return self.resolve_live(signals, attempts)
        except ResolutionExhausted as exc:
            logger.warning("%s: live sources exhausted (%s), using %s", self.label, _summary(exc.attempts), self.fallback.name)

        key = self.fallback.cache_key(signals)
        if key is not None:
            cached = self.cache.get(key)
            if cached is not None:
                attempts.append(AttemptRecord(self.fallback.name, "cached", key))
                return Resolution(self._finish(cached, signals), self.fallback.name, attempts)

        value = self.fallback.lookup(signals)
        if key is not None:
            self.cache.set(key, value, self.fallback.ttl)
        attempts.append(AttemptRecord(self.fallback.name, "ok", key))
        return Resolution(self._finish(value, signals), self.fallback.name, attempts)


def _summary(attempts: Sequence[AttemptRecord]) -> str:
    return ", ".join(f"{record.strategy}={record.outcome}" for record in attempts) or "none"
