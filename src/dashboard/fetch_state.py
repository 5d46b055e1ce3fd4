"""Request-generation bookkeeping so stale responses never overwrite newer ones."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, MutableMapping

from src.api.client import FetchResult
from src.utils.logging import get_logger

LOGGER = get_logger(__name__)

_GENERATION_PREFIX = '_fetch_generation::'
_RESULT_PREFIX = '_fetch_result::'


@dataclass(frozen=True)
class FetchToken:
    key: str
    generation: int


class FetchTracker:
    """Tracks the latest request per key inside a mutable mapping.

    In the app the mapping is `st.session_state`; tests pass a plain dict.
    """

    def __init__(self, state: MutableMapping[str, Any]):
        self.state = state

    def begin(self, key: str) -> FetchToken:
        generation = int(self.state.get(_GENERATION_PREFIX + key, 0)) + 1
        self.state[_GENERATION_PREFIX + key] = generation
        return FetchToken(key=key, generation=generation)

    def is_current(self, token: FetchToken) -> bool:
        return int(self.state.get(_GENERATION_PREFIX + token.key, 0)) == token.generation

    def store_if_current(self, token: FetchToken, result: FetchResult) -> bool:
        """Store `result` only when no newer request for the same key has started."""
        if not self.is_current(token):
            LOGGER.debug('Discarding stale response for %s (generation %s)', token.key, token.generation)
            return False
        self.state[_RESULT_PREFIX + token.key] = result
        return True

    def result(self, key: str) -> FetchResult | None:
        return self.state.get(_RESULT_PREFIX + key)

    def invalidate(self, key: str) -> None:
        """Forget the stored result and orphan any in-flight request."""
        self.state.pop(_RESULT_PREFIX + key, None)
        self.begin(key)

    def fetch(self, key: str, loader: Callable[[], FetchResult], *, force: bool = False) -> FetchResult:
        """Return the stored result for `key`, loading it when absent or forced."""
        cached = self.result(key)
        if cached is not None and not force:
            return cached
        token = self.begin(key)
        result = loader()
        self.store_if_current(token, result)
        return self.result(key) or result

    def clear(self, prefix: str = '') -> int:
        """Drop every stored result whose key starts with `prefix`; return how many."""
        keys = [k for k in list(self.state.keys()) if str(k).startswith(_RESULT_PREFIX + prefix)]
        for k in keys:
            self.invalidate(str(k)[len(_RESULT_PREFIX):])
        return len(keys)
