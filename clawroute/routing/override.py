"""Explicit tier overrides: [low], [med]/[medium], [high]."""

from __future__ import annotations

import re
from typing import Literal

from clawroute.routing.tiers import OVERRIDE_ALIASES, Tier

OverridePosition = Literal["anywhere", "prefix"]

# A tag glued to a word or another bracket is an index expression (arr[low]), not an override.
_TAG_PATTERN = re.compile(r"(?<![\w\]])\[(low|med|medium|high)\]", re.IGNORECASE)

_HSPACE = " \t"


def extract_override(
    text: str | None,
    position: OverridePosition = "anywhere",
) -> tuple[Tier | None, str]:
    """Return (tier_or_None, cleaned_text).

    The leftmost tag decides the tier and every recognized tag is removed,
    including tags that only become recognizable once a neighbouring tag is
    gone ("[high][low] hi"). Without a tag the text is returned unchanged.
    """
    raw = text or ""
    if position == "prefix":
        cleaned = raw.lstrip()
        match = _TAG_PATTERN.match(cleaned)
        if not match:
            return None, raw
        tier = _tier_for(match)
        while match:
            cleaned = cleaned[match.end():].lstrip()
            match = _TAG_PATTERN.match(cleaned)
        return tier, cleaned.strip()

    matches = list(_TAG_PATTERN.finditer(raw))
    if not matches:
        return None, raw
    tier = _tier_for(matches[0])
    cleaned = raw
    while matches:
        cleaned = _remove_spans(cleaned, matches)
        matches = list(_TAG_PATTERN.finditer(cleaned))
    return tier, cleaned


def _tier_for(match: re.Match[str]) -> Tier:
    return OVERRIDE_ALIASES[match.group(1).lower()]


def _remove_spans(text: str, matches: list[re.Match[str]]) -> str:
    pieces: list[str] = []
    cursor = 0
    for match in matches:
        pieces.append(text[cursor:match.start()])
        cursor = match.end()
    pieces.append(text[cursor:])

    cleaned = pieces[0]
    for piece in pieces[1:]:
        left = cleaned.rstrip(_HSPACE)
        right = piece.lstrip(_HSPACE)
        # Keep one space between words the tag used to separate, never two
        if left and right and not left[-1].isspace() and not right[0].isspace():
            cleaned = f"{left} {right}"
        else:
            cleaned = left + right
    return cleaned.strip()
