from __future__ import annotations

from collections import Counter
from typing import Optional
import json
import logging
import re

from pydantic import TypeAdapter, ValidationError

from bookswap.errors import InvalidAIResponseError, InvalidAssignmentError, NotEnoughParticipantsError
from bookswap.models.matching import Assignment, GroupedMatchResult, MatchOutcome, Violation
from bookswap.models.participant import Participant
from bookswap.persistence.roster_repository import RosterRepository
from bookswap.service.ai_client import GeminiClient
from bookswap.service.prompts import build_prompt

log = logging.getLogger(__name__)

_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)
_assignments_adapter = TypeAdapter(list[Assignment])


def strip_fences(text: str) -> str:
    return _FENCE.sub("", text).strip()


def parse_response(text: str, grouped: bool = False) -> tuple[list[Assignment], dict[str, str]]:
    """Decode the model's reply into assignments and (grouped) participant -> group."""
    cleaned = strip_fences(text)
    try:
        data = json.loads(cleaned)
        if grouped:
            result = GroupedMatchResult.model_validate(data)
            return result.matches, {g.participant_id: g.group for g in result.group_assignments}
        return _assignments_adapter.validate_python(data), {}
    except (json.JSONDecodeError, ValidationError) as exc:
        log.error("AI returned invalid format: %s; raw response: %r", exc, text)
        raise InvalidAIResponseError("AI returned invalid format") from exc


def merge_assignments(roster: list[Participant], assignments: list[Assignment],
                      groups: Optional[dict[str, str]] = None) -> list[Participant]:
    by_recipient: dict[str, Assignment] = {}
    for a in assignments:
        # a repeated recipient keeps its first entry
        by_recipient.setdefault(a.recipient_id, a)
    groups = groups or {}
    updated = []
    for p in roster:
        changes = {}
        match = by_recipient.get(p.id)
        if match is not None:
            changes.update(assigned_book_id=match.assigned_book_from_id, assigned_reason=match.reason)
        if p.id in groups:
            changes["group"] = groups[p.id]
        updated.append(p.model_copy(update=changes) if changes else p)
    return updated


def find_violations(roster: list[Participant], grouped: bool = False,
                    assignments: Optional[list[Assignment]] = None) -> list[Violation]:
    """Check an assigned roster: one book each, never your own, donors used once,
    and in grouped mode books only cross between groups. Entries from
    ``assignments`` naming someone outside the roster are reported too."""
    by_id = {p.id: p for p in roster}
    donors = Counter(p.assigned_book_id for p in roster if p.assigned_book_id)
    violations = []
    for p in roster:
        donor_id = p.assigned_book_id
        if not donor_id:
            violations.append(Violation(recipient_id=p.id, problem="no book assigned"))
            continue
        if donor_id == p.id:
            violations.append(Violation(recipient_id=p.id, problem="assigned their own book"))
            continue
        donor = by_id.get(donor_id)
        if donor is None:
            violations.append(Violation(recipient_id=p.id, problem=f"unknown donor {donor_id}"))
            continue
        if donors[donor_id] > 1:
            violations.append(Violation(recipient_id=p.id, problem=f"book from {donor_id} assigned more than once"))
        if grouped and p.group and donor.group and p.group == donor.group:
            violations.append(Violation(recipient_id=p.id, problem=f"donor {donor_id} is in the same group"))
    for recipient_id in dict.fromkeys(a.recipient_id for a in assignments or []):
        if recipient_id not in by_id:
            violations.append(Violation(recipient_id=recipient_id, problem="recipient is not on the roster"))
    return violations


class MatchingService:
    """Asks the model for pairings and writes them back to the roster.

    The model is trusted to follow the prompt; the result is checked
    afterwards and, with ``strict`` set, rejected instead of stored.
    """

    def __init__(self, roster: RosterRepository, ai: GeminiClient, strict: bool = False):
        self._roster = roster
        self._ai = ai
        self._strict = strict

    async def run(self, grouped: bool = False, api_key: Optional[str] = None) -> MatchOutcome:
        participants = await self._roster.list()
        if len(participants) < 2:
            raise NotEnoughParticipantsError("Need at least 2 participants to match.")

        prompt = build_prompt(participants, grouped=grouped)
        log.info("requesting %s matching for %d participants", "grouped" if grouped else "plain", len(participants))
        text = await self._ai.generate(prompt, api_key=api_key)

        assignments, groups = parse_response(text, grouped=grouped)
        updated = merge_assignments(participants, assignments, groups)

        violations = find_violations(updated, grouped=grouped, assignments=assignments)
        if violations:
            log.warning("AI matching broke %d rule(s): %s", len(violations),
                        "; ".join(f"{v.recipient_id}: {v.problem}" for v in violations))
            if self._strict:
                raise InvalidAssignmentError("AI returned an invalid assignment", violations)

        await self._roster.replace_all(updated)
        return MatchOutcome(success=True, matches=updated, violations=violations)
