"""
Deduplicator - Identity Merging for Canonical Records

The same creator can come back more than once: from overlapping pages, or
from different envelope fields of one response (``results`` and
``lookalikes``, say). Records are grouped by identity key
(``platform:lower(user_id or username or url)``) and one "better" record is
kept per key.

Tie-break, strict priority (first differing criterion wins):
    1. verified beats unverified
    2. more followers
    3. higher engagement rate
    4. more engagements
    5. has a profile URL
    6. has a picture
    7. first seen

Records with no derivable key are excluded from the output. Output order is
the insertion order of the first occurrence of each key; nothing is
re-sorted, so deduping an already-deduped list is a no-op.

Example:
    >>> deduplicator = Deduplicator()
    >>> unique = deduplicator.dedupe(records)
    >>> deduplicator.stats.duplicates_merged
    2
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from influencer_search.domain.entities import CanonicalInfluencer

# Ordered comparison criteria: higher value wins, first differing one decides
TIE_BREAK_CRITERIA: tuple[tuple[str, Callable[[CanonicalInfluencer], Any]], ...] = (
    ("verified", lambda r: bool(r.is_verified)),
    ("followers", lambda r: r.followers or 0),
    ("engagement_rate", lambda r: r.engagement_rate or 0),
    ("engagements", lambda r: r.engagements or 0),
    ("has_url", lambda r: bool(r.url)),
    ("has_picture", lambda r: bool(r.picture)),
)


@dataclass
class DedupStats:
    """Statistics from one dedupe pass."""

    total_input: int = 0
    unique: int = 0
    duplicates_merged: int = 0
    unkeyed_dropped: int = 0
    by_platform: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_input": self.total_input,
            "unique": self.unique,
            "duplicates_merged": self.duplicates_merged,
            "unkeyed_dropped": self.unkeyed_dropped,
            "by_platform": self.by_platform,
        }


def identity_key(record: CanonicalInfluencer) -> str | None:
    """Identity key of a record, or None when it cannot be keyed."""
    return record.identity_key


def better(current: CanonicalInfluencer, challenger: CanonicalInfluencer) -> CanonicalInfluencer:
    """Pick the better of two records sharing an identity key."""
    for _name, criterion in TIE_BREAK_CRITERIA:
        a, b = criterion(current), criterion(challenger)
        if a != b:
            return current if a > b else challenger
    return current


class Deduplicator:
    """
    Merges canonical records that represent the same identity.

    Keeps the statistics of the last pass in ``stats``.
    """

    def __init__(self) -> None:
        self.stats = DedupStats()

    def dedupe(self, records: Iterable[CanonicalInfluencer]) -> list[CanonicalInfluencer]:
        stats = DedupStats()
        merged: dict[str, CanonicalInfluencer] = {}

        for record in records:
            stats.total_input += 1
            key = identity_key(record)
            if key is None:
                stats.unkeyed_dropped += 1
                continue
            previous = merged.get(key)
            if previous is None:
                merged[key] = record
                continue
            stats.duplicates_merged += 1
            merged[key] = better(previous, record)

        results = list(merged.values())
        stats.unique = len(results)
        for record in results:
            platform = record.platform.value
            stats.by_platform[platform] = stats.by_platform.get(platform, 0) + 1
        self.stats = stats
        return results


# =============================================================================
# Convenience Functions
# =============================================================================


def dedupe(records: Iterable[CanonicalInfluencer]) -> list[CanonicalInfluencer]:
    """Deduplicate records with the strict tie-break (see module docstring)."""
    return Deduplicator().dedupe(records)


def merge_first_seen(
    existing: Iterable[CanonicalInfluencer],
    incoming: Iterable[CanonicalInfluencer],
) -> list[CanonicalInfluencer]:
    """
    Append ``incoming`` records whose key is not already present.

    Used by the client controller across pages: entries already shown are
    never evicted by a later duplicate. Unkeyable incoming records are
    dropped; existing entries are kept as they are.
    """
    merged = list(existing)
    seen = {key for key in (identity_key(r) for r in merged) if key is not None}
    for record in incoming:
        key = identity_key(record)
        if key is None or key in seen:
            continue
        seen.add(key)
        merged.append(record)
    return merged
