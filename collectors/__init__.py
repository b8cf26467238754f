"""
Collectors package: membership fetch and aggregation.
"""
from __future__ import annotations

from collectors.base import BaseCollector, CollectorResult
from collectors.fetcher import HttpFetcher, ResponseStream
from collectors.membership_collector import MembershipCollector

__all__ = [
    "BaseCollector",
    "CollectorResult",
    "HttpFetcher",
    "ResponseStream",
    "MembershipCollector",
]
