"""Prompt text for the matching engine."""
from __future__ import annotations

import json

from bookswap.models.participant import Participant

RULES = """\
Rules:
1. Each participant must receive exactly one book.
2. A participant CANNOT receive the book they brought.
3. Try to match the book to the participant's wishlist as best as possible.
4. Provide a short, fun, Christmas-themed reason for the match."""

GROUP_RULES = """\
5. First split the participants into two groups of (as close as possible) equal size: "red" and "brown".
6. Books may only move between groups: a "red" participant receives a book brought by a "brown" participant and vice versa."""

PLAIN_OUTPUT = """\
Output must be a valid JSON array of objects with the following structure:
[
  {
    "recipientId": "participant_id",
    "assignedBookFromId": "donor_participant_id",
    "reason": "Reason for this match..."
  }
]
Do not include markdown formatting like ```json. Just the raw JSON."""

GROUPED_OUTPUT = """\
Output must be a valid JSON object with the following structure:
{
  "groupAssignments": [
    {"participantId": "participant_id", "group": "red"}
  ],
  "matches": [
    {
      "recipientId": "participant_id",
      "assignedBookFromId": "donor_participant_id",
      "reason": "Reason for this match..."
    }
  ]
}
Do not include markdown formatting like ```json. Just the raw JSON."""


def participant_summary(p: Participant) -> dict:
    # one person brings one book, so the participant id doubles as the book id
    return {
        "id": p.id,
        "name": p.display_name,
        "broughtBookId": p.id,
        "broughtBookTitle": p.book_title,
        "broughtBookAuthors": p.book_authors,
        "broughtBookDescription": p.book_description,
        "wishlist": p.wishlist,
    }


def build_prompt(participants: list[Participant], grouped: bool = False) -> str:
    roster = json.dumps([participant_summary(p) for p in participants], ensure_ascii=False, indent=2)
    sections = [
        "You are a Secret Santa matching engine.",
        "I have a list of participants, each brought a book and has a wishlist.",
        RULES + ("\n" + GROUP_RULES if grouped else ""),
        "Participants:\n" + roster,
        GROUPED_OUTPUT if grouped else PLAIN_OUTPUT,
    ]
    return "\n\n".join(sections)
