"""
Data models for the Akka cluster exporter: member status, cluster nodes,
membership snapshot as served by Akka HTTP Management, and status counts.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Iterator

from errors import PayloadError


class MemberStatus(str, Enum):
    """Akka cluster member states (see Akka "member-states" lifecycle)."""
    JOINING = "Joining"
    UP = "Up"
    LEAVING = "Leaving"
    EXITING = "Exiting"
    DOWN = "Down"
    REMOVED = "Removed"

    @classmethod
    def parse(cls, value: Any) -> MemberStatus | None:
        """Exact, case-sensitive lookup. Unknown values return None."""
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


# Label order used when publishing.
PUBLISH_ORDER: tuple[MemberStatus, ...] = (
    MemberStatus.UP,
    MemberStatus.DOWN,
    MemberStatus.JOINING,
    MemberStatus.LEAVING,
    MemberStatus.EXITING,
    MemberStatus.REMOVED,
)


def _field(obj: dict[str, Any], name: str) -> Any:
    # Exact key first, then case-insensitive, like encoding/json-style decoders.
    if name in obj:
        return obj[name]
    lowered = name.lower()
    for k, v in obj.items():
        if isinstance(k, str) and k.lower() == lowered:
            return v
    return None


def _string(obj: dict[str, Any], name: str) -> str:
    v = _field(obj, name)
    if v is None:
        return ""
    if not isinstance(v, str):
        raise PayloadError(f"field {name!r}: expected string, got {type(v).__name__}")
    return v


def _array(obj: dict[str, Any], name: str) -> list[Any]:
    v = _field(obj, name)
    if v is None:
        return []
    if not isinstance(v, list):
        raise PayloadError(f"field {name!r}: expected array, got {type(v).__name__}")
    return v


@dataclass
class ClusterNode:
    """One cluster participant."""
    node: str = ""
    node_uid: str = ""
    status: str = ""
    roles: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, obj: Any) -> ClusterNode:
        if obj is None:
            return cls()
        if not isinstance(obj, dict):
            raise PayloadError(f"cluster node: expected object, got {type(obj).__name__}")
        roles = _array(obj, "roles")
        for r in roles:
            if not isinstance(r, str):
                raise PayloadError(f"field 'roles': expected strings, got {type(r).__name__}")
        return cls(
            node=_string(obj, "node"),
            node_uid=_string(obj, "nodeUid"),
            status=_string(obj, "status"),
            roles=list(roles),
        )

    @property
    def member_status(self) -> MemberStatus | None:
        return MemberStatus.parse(self.status)

    def to_dict(self) -> dict[str, Any]:
        return {
            "node": self.node,
            "nodeUid": self.node_uid,
            "status": self.status,
            "roles": list(self.roles),
        }


@dataclass
class MembershipSnapshot:
    """
    Decoded response of the management ``/members`` endpoint.

    Only ``members`` is used for aggregation; the other fields are parsed so
    they are available to callers.
    """
    self_node: str = ""
    leader: str = ""
    oldest: str = ""
    unreachable: list[ClusterNode] = field(default_factory=list)
    members: list[ClusterNode] = field(default_factory=list)

    @classmethod
    def from_dict(cls, obj: Any) -> MembershipSnapshot:
        if obj is None:
            return cls()
        if not isinstance(obj, dict):
            raise PayloadError(f"membership: expected object, got {type(obj).__name__}")
        return cls(
            self_node=_string(obj, "selfNode"),
            leader=_string(obj, "leader"),
            oldest=_string(obj, "oldest"),
            unreachable=[ClusterNode.from_dict(n) for n in _array(obj, "unreachable")],
            members=[ClusterNode.from_dict(n) for n in _array(obj, "members")],
        )

    @classmethod
    def from_json(cls, payload: bytes | str) -> MembershipSnapshot:
        """Decode a JSON payload. Raises PayloadError on malformed or mistyped input."""
        try:
            data = json.loads(payload)
        except (ValueError, RecursionError) as e:
            raise PayloadError(f"invalid JSON: {e}") from e
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        return {
            "selfNode": self.self_node,
            "leader": self.leader,
            "oldest": self.oldest,
            "unreachable": [n.to_dict() for n in self.unreachable],
            "members": [n.to_dict() for n in self.members],
        }


class StatusCounts:
    """Per-status member counts for one collection cycle. All six statuses always present."""

    def __init__(self) -> None:
        self._counts: dict[MemberStatus, int] = {s: 0 for s in PUBLISH_ORDER}

    def reset(self) -> None:
        for s in self._counts:
            self._counts[s] = 0

    def increment(self, status: MemberStatus) -> None:
        self._counts[status] += 1

    def replace_with(self, other: StatusCounts) -> None:
        for s, n in other.items():
            self._counts[s] = n

    def get(self, status: MemberStatus) -> int:
        return self._counts[status]

    def total(self) -> int:
        return sum(self._counts.values())

    def items(self) -> Iterator[tuple[MemberStatus, int]]:
        for s in PUBLISH_ORDER:
            yield s, self._counts[s]

    def as_dict(self) -> dict[str, int]:
        return {s.value: n for s, n in self.items()}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StatusCounts):
            return NotImplemented
        return self._counts == other._counts

    def __repr__(self) -> str:
        return f"StatusCounts({self.as_dict()})"


def count_statuses(members: Iterable[ClusterNode]) -> StatusCounts:
    """Count members by status. Unrecognized statuses are dropped."""
    counts = StatusCounts()
    for n in members:
        status = n.member_status
        if status is not None:
            counts.increment(status)
    return counts
