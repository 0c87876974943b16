"""Process-wide memo of compiled path patterns.

Entries are keyed by the exact template string, added once and never
evicted. Compilation is deterministic, so the cache only saves work: a
router built without it behaves identically.
"""

from __future__ import annotations

import logging
import threading

from routely.template import RoutePattern, compile_pattern

logger = logging.getLogger("routely.cache")


class PatternCache:
    """Append-only, thread-safe ``template -> RoutePattern`` mapping.

    Lookups of present keys read the dict without locking; a single
    ``threading.Lock`` serializes misses so two racing callers end up
    with the same stored pattern.
    """

    __slots__ = ("_lock", "_patterns")

    def __init__(self) -> None:
        self._patterns: dict[str, RoutePattern] = {}
        self._lock = threading.Lock()

    def get_or_compile(self, template: str) -> RoutePattern:
        pattern = self._patterns.get(template)
        if pattern is not None:
            return pattern

        with self._lock:
            pattern = self._patterns.get(template)
            if pattern is None:
                # Compile before publishing so readers never see a partial entry.
                pattern = compile_pattern(template)
                self._patterns[template] = pattern
                logger.debug("cached pattern for %s (%d total)", template, len(self._patterns))
        return pattern

    def __contains__(self, template: object) -> bool:
        return template in self._patterns

    def __len__(self) -> int:
        return len(self._patterns)

    def clear(self) -> None:
        """Drop every entry. Intended for tests."""
        with self._lock:
            self._patterns.clear()


PATTERN_CACHE = PatternCache()


def compile_template(template: str, cache: PatternCache | None = None) -> RoutePattern:
    """Compile *template* through *cache* (the process-wide one by default)."""
    if cache is None:
        cache = PATTERN_CACHE
    return cache.get_or_compile(template)
