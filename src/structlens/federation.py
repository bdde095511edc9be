"""Federation: merge independently scanned snapshots into one graph.

Id collisions between inputs are resolved deterministically and logged:

- ``newest``: the version from the snapshot with the latest scan timestamp
  wins; on a tie the first one encountered is kept.
- ``priority``: the version from the repository listed earliest in the
  priority list wins; repositories missing from the list lose to listed
  ones and fall back to ``newest`` among themselves.

Relationships are unioned without conflict resolution: nothing is ever
dropped except an exact repeat.  Two relationships with different ids
connecting the same pair are both kept; a relationship reusing an id taken
by a different one is kept under ``<repository>:<id>`` and logged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Sequence

from structlens.defaults import FEDERATION_STRATEGIES
from structlens.models import (
    ConflictRecord,
    FederatedSnapshot,
    Relationship,
    Snapshot,
    SnapshotMetadata,
)

log = logging.getLogger("structlens.federation")

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 scan timestamp; missing or unparsable sorts oldest."""
    if not value:
        return _EPOCH
    try:
        ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        log.warning("Unparsable scan timestamp %r, treating as oldest", value)
        return _EPOCH
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


@dataclass(frozen=True)
class _Origin:
    index: int
    repository: str
    scanned_at: datetime


@dataclass
class _Held:
    entity: Any
    origin: _Origin


def _decide(
    incumbent: _Origin,
    challenger: _Origin,
    strategy: str,
    priority: dict[str, int],
) -> tuple[bool, str]:
    """Return (challenger_wins, reason)."""
    if strategy == "priority":
        inc_rank = priority.get(incumbent.repository)
        chal_rank = priority.get(challenger.repository)
        if inc_rank is not None or chal_rank is not None:
            if chal_rank is not None and (inc_rank is None or chal_rank < inc_rank):
                return True, f"priority: '{challenger.repository}' ranks ahead of '{incumbent.repository}'"
            if inc_rank is not None and (chal_rank is None or inc_rank < chal_rank):
                return False, f"priority: '{incumbent.repository}' ranks ahead of '{challenger.repository}'"

    if challenger.scanned_at > incumbent.scanned_at:
        return True, "newest: later scan timestamp"
    if challenger.scanned_at < incumbent.scanned_at:
        return False, "newest: later scan timestamp"
    return False, "tie: first encountered kept"


def _merge_entities(
    inputs: list[tuple[_Origin, Sequence[Any]]],
    entity_type: str,
    strategy: str,
    priority: dict[str, int],
    conflicts: list[ConflictRecord],
) -> list[Any]:
    held: dict[str, _Held] = {}
    for origin, entities in inputs:
        for entity in entities:
            if not entity.repository:
                entity = replace(entity, repository=origin.repository)
            current = held.get(entity.id)
            if current is None:
                held[entity.id] = _Held(entity, origin)
                continue

            challenger_wins, reason = _decide(current.origin, origin, strategy, priority)
            winner, loser = (_Held(entity, origin), current) if challenger_wins else (current, _Held(entity, origin))
            conflicts.append(ConflictRecord(
                entity_id=entity.id,
                entity_type=entity_type,
                winner_repository=winner.origin.repository,
                loser_repository=loser.origin.repository,
                reason=reason,
                loser_value=loser.entity.to_dict(),
            ))
            log.debug("Conflict on %s %s: kept %s (%s)", entity_type, entity.id,
                      winner.origin.repository, reason)
            held[entity.id] = winner
    # dicts keep first-insertion order, so a replaced winner keeps its slot
    return [h.entity for h in held.values()]


def _union_relationships(
    origins: list[_Origin],
    snapshots: Sequence[Snapshot],
    conflicts: list[ConflictRecord],
) -> list[Relationship]:
    """Union every relationship.  Id collisions never drop an edge.

    An exact repeat of an already kept relationship is skipped.  A
    different relationship reusing a taken id is kept under a
    repository-qualified id and the rename is logged as a conflict.
    """
    kept: dict[str, tuple[Relationship, _Origin]] = {}
    for origin, s in zip(origins, snapshots):
        for rel in s.relationships:
            first = kept.get(rel.id)
            if first is None:
                kept[rel.id] = (rel, origin)
                continue
            if first[0] == rel:
                continue

            new_id = f"{origin.repository or origin.index}:{rel.id}"
            n = 2
            while new_id in kept:
                new_id = f"{origin.repository or origin.index}:{rel.id}#{n}"
                n += 1
            kept[new_id] = (replace(rel, id=new_id), origin)
            conflicts.append(ConflictRecord(
                entity_id=rel.id,
                entity_type="relationship",
                winner_repository=first[1].repository,
                loser_repository=origin.repository,
                reason=f"id collision: both kept, later renamed to '{new_id}'",
                loser_value=rel.to_dict(),
            ))
            log.debug("Relationship id %s reused by %s, kept as %s", rel.id, origin.repository, new_id)
    return [r for r, _ in kept.values()]


def federate(
    snapshots: Sequence[Snapshot],
    strategy: str = "newest",
    priority: Sequence[str] | None = None,
) -> FederatedSnapshot:
    """Merge *snapshots* into a single snapshot plus a conflict log."""
    if strategy not in FEDERATION_STRATEGIES:
        raise ValueError(f"Unknown federation strategy '{strategy}', expected one of {FEDERATION_STRATEGIES}")

    ranks: dict[str, int] = {}
    for i, repo in enumerate(priority or []):
        ranks.setdefault(repo, i)

    origins = [
        _Origin(index=i, repository=s.metadata.repository,
                scanned_at=_parse_timestamp(s.metadata.scan_timestamp))
        for i, s in enumerate(snapshots)
    ]

    conflicts: list[ConflictRecord] = []
    components = _merge_entities(
        [(o, s.components) for o, s in zip(origins, snapshots)],
        "component", strategy, ranks, conflicts,
    )
    data_objects = _merge_entities(
        [(o, s.data_objects) for o, s in zip(origins, snapshots)],
        "data_object", strategy, ranks, conflicts,
    )

    relationships = _union_relationships(origins, snapshots, conflicts)

    repositories = list(dict.fromkeys(o.repository for o in origins if o.repository))
    latest = max(origins, key=lambda o: o.scanned_at, default=None)
    metadata = SnapshotMetadata(
        repository=",".join(repositories),
        scan_timestamp=snapshots[latest.index].metadata.scan_timestamp if latest else "",
        extra={"federated": True, "sources": repositories, "strategy": strategy},
    )

    merged = Snapshot(
        metadata=metadata,
        components=tuple(components),
        data_objects=tuple(data_objects),
        relationships=tuple(relationships),
        diagnostics=tuple(d for s in snapshots for d in s.diagnostics),
    )
    log.info("Federated %d snapshots: %d components, %d relationships, %d conflicts",
             len(snapshots), len(components), len(relationships), len(conflicts))
    return FederatedSnapshot(snapshot=merged, conflicts=conflicts)
