from __future__ import annotations

from typing import Optional

from pydantic import ConfigDict, Field

from bookswap.models.camel_case import CamelCase
from bookswap.models.participant import Group, Participant


# ===== AI response shapes =====


class Assignment(CamelCase):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    recipient_id: str
    assigned_book_from_id: str
    reason: Optional[str] = None


class GroupAssignment(CamelCase):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    participant_id: str
    group: Group


class GroupedMatchResult(CamelCase):
    group_assignments: list[GroupAssignment]
    matches: list[Assignment]


# ===== Orchestrator output =====


class Violation(CamelCase):
    recipient_id: str
    problem: str


class MatchOutcome(CamelCase):
    success: bool = True
    matches: list[Participant] = Field(default_factory=list)
    violations: list[Violation] = Field(default_factory=list)


class Pair(CamelCase):
    recipient_id: str
    recipient_name: str
    donor_id: str
    donor_name: Optional[str] = None
    book_title: Optional[str] = None
    reason: Optional[str] = None
    group: Optional[Group] = None
