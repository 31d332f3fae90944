from __future__ import annotations

import re
from dataclasses import dataclass

from .metrics import SQUAD_ORDINALS


SQUAD_WORDS = {
    "first": 1,
    "second": 2,
    "third": 3,
    "fourth": 4,
    "fifth": 5,
    "sixth": 6,
    "seventh": 7,
    "eighth": 8,
}

SQUAD_TOKEN_RE = re.compile(
    r"^(?:(?P<short>[1-8])s|(?P<ordinal>[1-8])(?:st|nd|rd|th)(?:\s+(?:xi|team))?|(?P<word>first|second|third|fourth|fifth|sixth|seventh|eighth)(?:\s+(?:xi|team))?)$",
    re.IGNORECASE,
)


def canonical_squad(token: str) -> str | None:
    match = SQUAD_TOKEN_RE.match(token.strip())
    if not match:
        return None

    if match.group("short"):
        number = int(match.group("short"))
    elif match.group("ordinal"):
        number = int(match.group("ordinal"))
    else:
        number = SQUAD_WORDS[match.group("word").lower()]
    return f"{SQUAD_ORDINALS[number - 1]} XI"


def squad_display(squad: str) -> str:
    """'4th XI' -> '4s'. Anything unrecognised is returned untouched."""
    match = re.match(r"^([1-8])(?:st|nd|rd|th) XI$", squad)
    if not match:
        return squad
    return f"{match.group(1)}s"


@dataclass(frozen=True)
class SubjectMatch:
    name: str
    start: int
    end: int


class SubjectMatcher:
    def __init__(self, known_names: list[str]):
        self.known_names = sorted({name.strip() for name in known_names if name and name.strip()})
        self._by_lower = {name.lower(): name for name in self.known_names}
        self._patterns = [
            (name, re.compile(rf"(?<!\w){re.escape(name)}(?!\w)", re.IGNORECASE))
            for name in sorted(self.known_names, key=lambda item: (-len(item), item))
        ]

    def lookup(self, name: str) -> str | None:
        return self._by_lower.get(" ".join(name.split()).lower())

    def find(self, text: str) -> list[SubjectMatch]:
        claimed: list[SubjectMatch] = []
        for name, pattern in self._patterns:
            for match in pattern.finditer(text):
                start, end = match.span()
                if any(start < taken.end and end > taken.start for taken in claimed):
                    continue
                claimed.append(SubjectMatch(name=name, start=start, end=end))
        return sorted(claimed, key=lambda item: item.start)

    def distinct_names(self, text: str) -> list[str]:
        names: list[str] = []
        for match in self.find(text):
            if match.name not in names:
                names.append(match.name)
        return names
