"""
Prometheus collector for Akka cluster membership.

Every scrape runs one full cycle under a lock: reset counts, fetch the
management endpoint, decode, count by status, then publish ``akka_up`` and
``akka_current_members{status=...}``. All six status labels are published on
every scrape, zeros included.
"""
from __future__ import annotations

import threading
from typing import Callable, Iterable, TypeVar

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import Collector

from collectors.base import BaseCollector
from collectors.fetcher import HttpFetcher
from collectors.membership_collector import MembershipCollector
from models import MembershipSnapshot, StatusCounts

NAMESPACE = "akka"
UP_METRIC = f"{NAMESPACE}_up"
MEMBERS_METRIC = f"{NAMESPACE}_current_members"
STATUS_LABEL = "status"

UP_HELP = "Was the last scrape of akka http management endpoint successful."
MEMBERS_HELP = "Current number of members of the akka cluster."

T = TypeVar("T")


class AkkaClusterExporter(Collector):
    """Owns the per-cycle state (liveness + counts); mutated only under ``_lock``."""

    def __init__(self, collector: BaseCollector) -> None:
        self._collector = collector
        self._lock = threading.Lock()
        self.up: int | None = None
        self.counts = StatusCounts()
        self.snapshot = MembershipSnapshot()
        self.last_error: str | None = None

    @classmethod
    def from_uri(cls, uri: str, timeout: float) -> AkkaClusterExporter:
        """Build an exporter scraping ``uri``. Raises ConfigurationError on a bad URI."""
        return cls(MembershipCollector(HttpFetcher(uri, timeout)))

    def describe(self) -> Iterable[GaugeMetricFamily]:
        return [
            GaugeMetricFamily(UP_METRIC, UP_HELP),
            GaugeMetricFamily(MEMBERS_METRIC, MEMBERS_HELP, labels=[STATUS_LABEL]),
        ]

    def collect(self) -> Iterable[GaugeMetricFamily]:
        return self._cycle(self._families)

    def collect_state(self) -> tuple[int, dict[str, int]]:
        """Run one cycle and return (up, counts by status label)."""
        return self._cycle(lambda: (int(self.up or 0), self.counts.as_dict()))

    def _cycle(self, publish: Callable[[], T]) -> T:
        # reset, scrape and publish form one atomic step
        with self._lock:
            self._reset()
            self._scrape()
            return publish()

    def _reset(self) -> None:
        self.counts.reset()
        self.snapshot = MembershipSnapshot()
        self.last_error = None

    def _scrape(self) -> None:
        result = self._collector.collect_safe()
        self.last_error = result.error
        if not result.success:
            self.up = 0
            return
        self.up = 1
        counts = result.data.get("counts")
        if isinstance(counts, StatusCounts):
            self.counts.replace_with(counts)
        snapshot = result.data.get("snapshot")
        if isinstance(snapshot, MembershipSnapshot):
            self.snapshot = snapshot

    def _families(self) -> list[GaugeMetricFamily]:
        up = GaugeMetricFamily(UP_METRIC, UP_HELP, value=float(self.up or 0))
        members = GaugeMetricFamily(MEMBERS_METRIC, MEMBERS_HELP, labels=[STATUS_LABEL])
        for status, n in self.counts.items():
            members.add_metric([status.value], float(n))
        return [up, members]
