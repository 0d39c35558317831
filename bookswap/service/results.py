from __future__ import annotations

from bookswap.models.matching import Pair
from bookswap.models.participant import Participant


def build_pairs(roster: list[Participant]) -> list[Pair]:
    """Resolve each assignment into names and titles; grouped rosters sort by group."""
    by_id = {p.id: p for p in roster}
    pairs = []
    for p in roster:
        if not p.assigned_book_id:
            continue
        donor = by_id.get(p.assigned_book_id)
        pairs.append(Pair(
            recipient_id=p.id,
            recipient_name=p.display_name,
            donor_id=p.assigned_book_id,
            donor_name=donor.display_name if donor else None,
            book_title=donor.book_title if donor else None,
            reason=p.assigned_reason,
            group=p.group,
        ))
    if any(pair.group for pair in pairs):
        pairs.sort(key=lambda pair: pair.group or "~")
    return pairs
