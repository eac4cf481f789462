"""
Generation counters for last-writer-wins commits.

Every asynchronous operation takes a token from its scope when it starts.
When it finishes it may only commit if its token is still the newest one
issued for that scope; older results are dropped on arrival.

Example:
    generations = GenerationCounter()
    token = generations.issue('email')
    errors = await validator(...)
    if generations.is_current('email', token):
        apply(errors)
"""

from typing import Callable, Dict, Generic, Hashable, Optional, TypeVar

T = TypeVar('T')


class GenerationCounter:
    """Monotonic tokens; the newest one issued for a scope is current.

    Tokens come from one sequence shared by all scopes, so a token is never
    issued twice, even for a scope that was discarded in between.
    """

    def __init__(self):
        self._sequence = 0
        self._tokens: Dict[Hashable, int] = {}

    def issue(self, scope: Hashable) -> int:
        """
        Start a new generation for ``scope``.

        Returns:
            The token identifying the new generation
        """
        self._sequence += 1
        self._tokens[scope] = self._sequence
        return self._sequence

    def current(self, scope: Hashable) -> int:
        """Newest token issued for ``scope`` (0 when none)."""
        return self._tokens.get(scope, 0)

    def is_current(self, scope: Hashable, token: int) -> bool:
        return self._tokens.get(scope, 0) == token

    def discard(self, scope: Hashable) -> None:
        """Forget ``scope``; its outstanding tokens stay stale."""
        self._tokens.pop(scope, None)

    def invalidate(self, scope: Optional[Hashable] = None) -> None:
        """
        Make every outstanding token stale.

        Args:
            scope: Only invalidate this scope (default: all scopes)
        """
        scopes = [scope] if scope is not None else list(self._tokens)
        for key in scopes:
            self.issue(key)


class GenerationCache(Generic[T]):
    """
    Single cached value that is recomputed when its generation moves on.

    Example:
        cache = GenerationCache(lambda: state.values_generation)
        flat = cache.get_or_compute(lambda: flatten(state.values))
    """

    def __init__(self, generation_provider: Callable[[], int]):
        """
        Args:
            generation_provider: Returns the generation the cached value depends on
        """
        self._generation_provider = generation_provider
        self._cached_value: Optional[T] = None
        self._cached_generation: int = -1

    def get_or_compute(self, compute_fn: Callable[[], T]) -> T:
        generation = self._generation_provider()
        if generation == self._cached_generation and self._cached_value is not None:
            return self._cached_value

        value = compute_fn()
        self._cached_value = value
        self._cached_generation = generation
        return value

    def invalidate(self) -> None:
        """Manually invalidate the cache."""
        self._cached_value = None
        self._cached_generation = -1
