"""
Base collector interface: membership sources implement this.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from utils import get_logger

logger = get_logger(__name__)


@dataclass
class CollectorResult:
    """
    Result from a single collector pass.

    ``success`` reports whether the upstream was reachable; ``error`` may be
    set on a successful pass when the payload itself was unusable.
    """
    success: bool = True
    error: str | None = None
    data: dict[str, Any] = field(default_factory=dict)


class BaseCollector(ABC):
    """Abstract base for all collectors."""

    name: str = "base"

    @abstractmethod
    def collect(self) -> CollectorResult:
        """Run collection and return result. Should not raise; return CollectorResult(success=False, error="...") on failure."""
        ...

    def collect_safe(self) -> CollectorResult:
        """Wrapper that catches exceptions and returns failed result."""
        try:
            return self.collect()
        except Exception as e:
            logger.exception("Collector %s failed", self.name)
            return CollectorResult(success=False, error=str(e), data={})
