"""
Container errors.
"""

from typing import Iterable, List, Optional


class DIError(Exception):
    """A provider could not be registered or built."""


class ProviderNotFoundError(DIError, LookupError):
    """Nothing is registered for the requested token."""

    def __init__(
        self,
        token: str,
        tag: Optional[str] = None,
        candidates: Iterable[str] = (),
    ):
        self.token = token
        self.tag = tag
        self.candidates: List[str] = list(candidates)

        target = f"{token}#{tag}" if tag else token
        message = f"Nothing registered for {target}"
        if self.candidates:
            message += f" (similar keys: {', '.join(self.candidates)})"
        super().__init__(message)


class DuplicateProviderError(DIError):
    """A different provider already owns the token."""

    def __init__(self, token: str, tag: Optional[str], existing: str):
        self.token = token
        self.tag = tag
        self.existing = existing
        target = f"{token}#{tag}" if tag else token
        super().__init__(f"{target} is already provided by '{existing}'")


class DependencyCycleError(DIError):
    """A provider depends on itself, directly or through others."""

    def __init__(self, cycle: List[str]):
        self.cycle = cycle
        super().__init__("Dependency cycle: " + " -> ".join(cycle))
