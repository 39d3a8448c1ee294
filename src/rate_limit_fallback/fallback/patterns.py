"""
Rate-limit detection on host status messages.
"""

from typing import Iterable, Optional


class PatternMatcher:
    """
    Case-insensitive substring matcher for rate/usage-limit messages.

    A message matches when it contains any configured pattern. Blank patterns
    are dropped so they cannot match every message.

    Examples:
        >>> PatternMatcher(["rate limit"]).matches("RATE LIMIT exceeded")
        True
        >>> PatternMatcher(["rate limit"]).matches("")
        False
    """

    def __init__(self, patterns: Iterable[str]):
        self.patterns: tuple[str, ...] = tuple(
            pattern.lower() for pattern in patterns if pattern and pattern.strip()
        )

    def matches(self, message: Optional[str]) -> bool:
        if not message:
            return False
        lowered = message.lower()
        return any(pattern in lowered for pattern in self.patterns)

    def __call__(self, message: Optional[str]) -> bool:
        return self.matches(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(patterns={list(self.patterns)!r})"
