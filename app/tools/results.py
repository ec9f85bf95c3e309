from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

from app.errors import ProviderUnavailable

T = TypeVar("T")


@dataclass
class ProviderResult(Generic[T]):
    """Outcome of one collaborator call.

    ``ok`` with an empty ``items`` list means the provider answered with zero
    results; ``error`` is set only when the provider itself failed.
    """

    source: str
    items: List[T] = field(default_factory=list)
    error: Optional[ProviderUnavailable] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, source: str, reason: str) -> "ProviderResult[T]":
        return cls(source=source, items=[], error=ProviderUnavailable(source, reason))
