"""Forum tag selection for threaded posts."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

_NON_WORD_RE = re.compile(r"[^\w\s]")


@dataclass(frozen=True)
class Tag:
    """A forum tag offered by the destination channel."""

    name: str
    id: int | str


def normalize_tag_text(text: str) -> str:
    """Drop punctuation and emoji, lowercase, trim."""
    return _NON_WORD_RE.sub("", text).strip().lower()


def _mutual_contains(a: str, b: str) -> bool:
    return bool(a) and bool(b) and (a in b or b in a)


def select_tag(
    candidates: Sequence[Tag],
    *,
    travel_type: str | None = None,
    city: str | None = None,
    title: str | None = None,
    description: str | None = None,
) -> Tag | None:
    """Pick the best tag for a post.

    Heuristics in priority order: travel type, city, title, description,
    then the first candidate. A heuristic is skipped when its input is empty.
    Returns None only when there are no candidates.
    """
    if not candidates:
        return None

    normalized = [(tag, normalize_tag_text(tag.name)) for tag in candidates]

    if travel_type:
        wanted = normalize_tag_text(travel_type)
        for tag, name in normalized:
            if _mutual_contains(name, wanted):
                return tag

    if city:
        wanted = city.lower()
        for tag in candidates:
            if wanted in tag.name.lower():
                return tag

    if title:
        wanted = title.lower()
        for tag, name in normalized:
            if _mutual_contains(name, wanted):
                return tag

    if description:
        wanted = description.lower()
        for tag, name in normalized:
            if name and name in wanted:
                return tag

    return candidates[0]
