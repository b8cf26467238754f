"""
Cluster membership collector: fetch /members, decode, count members by status.
"""
from __future__ import annotations

from collectors.base import BaseCollector, CollectorResult
from collectors.fetcher import HttpFetcher
from errors import FetchError, PayloadError, TransportError
from models import MembershipSnapshot, StatusCounts, count_statuses
from utils import get_logger

logger = get_logger(__name__)


class MembershipCollector(BaseCollector):
    """
    One pass against the management endpoint.

    ``success`` mirrors transport health only: a failed request or a body
    that cannot be read in time is a failure. A body that arrives but cannot
    be decoded still yields a successful result, with zero counts and
    ``error`` describing the problem.
    """

    name = "membership"

    def __init__(self, fetcher: HttpFetcher) -> None:
        self.fetcher = fetcher

    def collect(self) -> CollectorResult:
        try:
            stream = self.fetcher.fetch()
        except FetchError as e:
            logger.error("Can't scrape akka http management endpoint: %s", e)
            return CollectorResult(success=False, error=str(e))

        with stream:
            try:
                body = stream.read()
            except TransportError as e:
                logger.error("Can't read akka http management response: %s", e)
                return CollectorResult(success=False, error=str(e))

        try:
            snapshot = MembershipSnapshot.from_json(body)
        except PayloadError as e:
            logger.warning("Can't decode akka cluster membership: %s", e)
            return _empty_result(str(e))

        counts = count_statuses(snapshot.members)
        logger.debug("Collected %d members, %d with known status", len(snapshot.members), counts.total())
        return CollectorResult(success=True, data={"snapshot": snapshot, "counts": counts})


def _empty_result(error: str) -> CollectorResult:
    return CollectorResult(
        success=True,
        error=error,
        data={"snapshot": MembershipSnapshot(), "counts": StatusCounts()},
    )
