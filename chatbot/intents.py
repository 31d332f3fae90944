from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

from .entities import canonical_squad
from .formatting import normalize_season, season_start_date, since_year_start_date, to_iso_date
from .metrics import MetricCatalog
from .types import TimeFrame, TimeFrameType


CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")

DATE = r"\d{1,2}[/-]\d{1,2}[/-](?:\d{4}|\d{2})"
SQUAD = (
    r"(?:[1-8]s|[1-8](?:st|nd|rd|th)\s+(?:xi|team)"
    r"|(?:first|second|third|fourth|fifth|sixth|seventh|eighth)\s+(?:xi|team))"
)

BETWEEN_DATES_RE = re.compile(
    rf"\b(?:between|from)\s+({DATE})\s+(?:and|to|until)\s+({DATE})(?![\d/])",
    re.IGNORECASE,
)
YEAR_RANGE_RE = re.compile(
    r"\bbetween\s+(20\d{2})\s+and\s+(20\d{2})\b|\b(?:from\s+)?(20\d{2})\s*(?:-|to|until|through)\s*(20\d{2})\b",
    re.IGNORECASE,
)
SEASON_RE = re.compile(
    r"(?<!before )(?<!before the )(?<!since )(?<!since the )(?<![\d/])\b(20\d{2}\s*[/-]\s*\d{2})\b(?![/\d])",
    re.IGNORECASE,
)
BEFORE_RE = re.compile(
    r"\bbefore\s+(?:the\s+)?(?:(20\d{2}\s*[/-]\s*\d{2})(?![/\d])|(\d{4}))\b",
    re.IGNORECASE,
)
SINCE_RE = re.compile(
    r"\bsince\s+(?:the\s+)?(?:(20\d{2}\s*[/-]\s*\d{2})(?![/\d])|(\d{4}))\b",
    re.IGNORECASE,
)
SINGLE_DATE_RE = re.compile(rf"(?<![\d/])({DATE})(?![\d/])")

HOME_RE = re.compile(r"\b(?:at home|home (?:games?|matches|match|fixtures?)|(?<!away from )home)\b", re.IGNORECASE)
AWAY_RE = re.compile(
    r"\b(?:away from home|away (?:games?|matches|match|fixtures?)|away|on the road)\b",
    re.IGNORECASE,
)

TEAM_EXCLUSION_RE = re.compile(
    rf"\b(?:(?:when|while|whilst)\s+)?not\s+playing\s+for\s+(?:the\s+)?({SQUAD})\b"
    rf"|\bexcluding\s+(?:the\s+)?({SQUAD})\b"
    rf"|\bexcept\s+(?:for\s+)?(?:the\s+)?({SQUAD})\b",
    re.IGNORECASE,
)
TEAM_INCLUSION_RE = re.compile(rf"\b({SQUAD})\b", re.IGNORECASE)
FOR_THE_ORDINAL_RE = re.compile(r"\bfor\s+the\s+([1-8](?:st|nd|rd|th))\b(?!\s+(?:of|xi|team)\b)", re.IGNORECASE)

OPPOSITION_WORD = r"(?:[A-Z][a-z][A-Za-z'&-]*|[A-Z]{2,3}\b)"
OPPOSITION_RE = re.compile(
    rf"\b(?:against|vs\.?|versus)\s+(?:the\s+)?({OPPOSITION_WORD}(?:\s+{OPPOSITION_WORD})*)"
)
COMPETITION_RE = re.compile(r"\b(league|cup|friendly|friendlies)\b", re.IGNORECASE)
RESULT_PATTERNS = [
    (
        "W",
        re.compile(
            r"\bin\s+(?:wins|victories|winning\s+(?:games|matches)|(?:games|matches)\s+(?:we\s+|they\s+)?won)\b",
            re.IGNORECASE,
        ),
    ),
    (
        "D",
        re.compile(
            r"\bin\s+(?:draws|drawn\s+(?:games|matches)|(?:games|matches)\s+(?:we\s+|they\s+)?drew)\b",
            re.IGNORECASE,
        ),
    ),
    (
        "L",
        re.compile(
            r"\bin\s+(?:defeats|losses|lost\s+(?:games|matches)|losing\s+(?:games|matches)|(?:games|matches)\s+(?:we\s+|they\s+)?lost)\b",
            re.IGNORECASE,
        ),
    ),
]
POSITION_RE = re.compile(
    r"\b(?:as\s+(?:an?\s+)?|playing\s+as\s+(?:an?\s+)?)(goalkeeper|keeper|gk|defender|def|midfielder|mid|forward|striker|fwd)\b"
    r"|\b(in goal)\b",
    re.IGNORECASE,
)
POSITION_ALIASES = {
    "goalkeeper": "GK",
    "keeper": "GK",
    "gk": "GK",
    "in goal": "GK",
    "defender": "DEF",
    "def": "DEF",
    "midfielder": "MID",
    "mid": "MID",
    "forward": "FWD",
    "striker": "FWD",
    "fwd": "FWD",
}
CLUB_RE = re.compile(
    r"\b(?:the whole club|the club|club[- ]wide|as a club|across all teams|all teams|all squads)\b",
    re.IGNORECASE,
)

SUBJECT_CANDIDATE_RE = re.compile(r"\b[A-Z][A-Za-z'-]+(?:\s+[A-Z][A-Za-z'-]+)+\b")
QUESTION_WORDS = {
    "how",
    "what",
    "which",
    "who",
    "when",
    "where",
    "has",
    "have",
    "had",
    "did",
    "does",
    "do",
    "is",
    "was",
    "can",
    "could",
    "tell",
    "show",
    "give",
    "list",
}
# Generic nouns that only name a metric when nothing more specific is asked for.
WEAK_ALIASES = {"games", "matches", "goal", "home games", "home matches", "away games", "away matches"}

# "How many goals has X conceded?" asks for goals conceded, not goals.
SUPERSEDED_METRICS = {"C": {"G"}}

NON_SUBJECT_WORDS = {"league", "cup", "trophy", "shield", "xi", "team", "club", "season", "fantasy", "match"}


@dataclass
class TimeFrameMatch:
    frame: TimeFrame | None
    time_range: str


def clean_question(question: str) -> str:
    return " ".join(CONTROL_CHARS_RE.sub(" ", question or "").split())


def extract_metric_keys(question: str, catalog: MetricCatalog) -> list[str]:
    matches = catalog.find_aliases(question)
    strong = [match for match in matches if match.alias not in WEAK_ALIASES]

    keys: list[str] = []
    for match in strong or matches:
        if match.key not in keys:
            keys.append(match.key)

    for key, superseded in SUPERSEDED_METRICS.items():
        if key in keys:
            keys = [item for item in keys if item not in superseded]
    return keys


def _match_between_dates(question: str) -> TimeFrameMatch | None:
    match = BETWEEN_DATES_RE.search(question)
    if not match:
        return None

    start = to_iso_date(match.group(1))
    end = to_iso_date(match.group(2))
    if not start or not end:
        return None

    value = f"{start} to {end}"
    return TimeFrameMatch(TimeFrame(TimeFrameType.BETWEEN, value, start=start, end=end), value)


def _match_year_range(question: str) -> TimeFrameMatch | None:
    match = YEAR_RANGE_RE.search(question)
    if not match:
        return None

    first = match.group(1) or match.group(3)
    last = match.group(2) or match.group(4)
    value = f"{first} to {last}"
    return TimeFrameMatch(
        TimeFrame(TimeFrameType.RANGE, value, start=f"{first}-01-01", end=f"{last}-12-31"),
        value,
    )


def _match_season(question: str) -> TimeFrameMatch | None:
    match = SEASON_RE.search(question)
    if not match:
        return None

    season = normalize_season(match.group(1))
    if season is None:
        return None
    return TimeFrameMatch(TimeFrame(TimeFrameType.SEASON, season), season)


def _match_before(question: str) -> TimeFrameMatch | None:
    match = BEFORE_RE.search(question)
    if not match:
        return None

    if match.group(1):
        season = normalize_season(match.group(1))
        if season is None:
            return None
        return TimeFrameMatch(TimeFrame(TimeFrameType.BEFORE, season, end=season_start_date(season)), season)

    year = match.group(2)
    return TimeFrameMatch(TimeFrame(TimeFrameType.BEFORE, year, end=f"{year}-01-01"), year)


def _match_since(question: str) -> TimeFrameMatch | None:
    match = SINCE_RE.search(question)
    if not match:
        return None

    if match.group(1):
        season = normalize_season(match.group(1))
        if season is None:
            return None
        return TimeFrameMatch(TimeFrame(TimeFrameType.SINCE, season, start=season_start_date(season)), season)

    year = match.group(2)
    return TimeFrameMatch(
        TimeFrame(TimeFrameType.SINCE, year, start=since_year_start_date(int(year))),
        year,
    )


def _match_single_date(question: str) -> TimeFrameMatch | None:
    for match in SINGLE_DATE_RE.finditer(question):
        iso_date = to_iso_date(match.group(1))
        if iso_date:
            return TimeFrameMatch(None, iso_date)
    return None


# Tried in order; the first strategy that matches decides the time frame.
TIME_FRAME_STRATEGIES: list[Callable[[str], TimeFrameMatch | None]] = [
    _match_between_dates,
    _match_year_range,
    _match_season,
    _match_before,
    _match_since,
    _match_single_date,
]


def extract_time_frame(question: str) -> TimeFrameMatch | None:
    for strategy in TIME_FRAME_STRATEGIES:
        matched = strategy(question)
        if matched is not None:
            return matched
    return None


def extract_locations(question: str) -> list[str]:
    locations: list[str] = []
    if HOME_RE.search(question):
        locations.append("home")

    without_home = HOME_RE.sub(" ", question)
    if AWAY_RE.search(without_home):
        locations.append("away")
    return locations


def _blank_spans(text: str, spans: list[tuple[int, int]]) -> str:
    chars = list(text)
    for start, end in spans:
        for index in range(start, end):
            chars[index] = " "
    return "".join(chars)


def extract_team_filters(question: str) -> tuple[list[str], list[str]]:
    exclusions: list[str] = []
    spans: list[tuple[int, int]] = []
    for match in TEAM_EXCLUSION_RE.finditer(question):
        token = next(group for group in match.groups() if group)
        squad = canonical_squad(token)
        if squad and squad not in exclusions:
            exclusions.append(squad)
        spans.append(match.span())

    remaining = _blank_spans(question, spans)
    found: list[tuple[int, str]] = []
    for pattern in (TEAM_INCLUSION_RE, FOR_THE_ORDINAL_RE):
        for match in pattern.finditer(remaining):
            squad = canonical_squad(match.group(1))
            if squad:
                found.append((match.start(1), squad))

    inclusions: list[str] = []
    for _, squad in sorted(found):
        if squad not in inclusions and squad not in exclusions:
            inclusions.append(squad)
    return inclusions, exclusions


def extract_oppositions(question: str) -> list[str]:
    names: list[str] = []
    for match in OPPOSITION_RE.finditer(question):
        name = match.group(1).strip(" .'-")
        if name and name not in names:
            names.append(name)
    return names


def extract_competition_types(question: str) -> list[str]:
    found: list[str] = []
    for match in COMPETITION_RE.finditer(question):
        token = match.group(1).lower()
        comp_type = "Friendly" if token.startswith("friendl") else token.capitalize()
        if comp_type not in found:
            found.append(comp_type)
    return found


def extract_results(question: str) -> list[str]:
    return [code for code, pattern in RESULT_PATTERNS if pattern.search(question)]


def extract_positions(question: str) -> list[str]:
    positions: list[str] = []
    for match in POSITION_RE.finditer(question):
        token = (match.group(1) or match.group(2)).lower()
        position = POSITION_ALIASES[token]
        if position not in positions:
            positions.append(position)
    return positions


def detect_club_scope(question: str) -> bool:
    return bool(CLUB_RE.search(question))


def extract_subject_candidate(question: str, ignore: list[str] | None = None) -> str | None:
    ignored = {value.lower() for value in ignore or []}

    for match in SUBJECT_CANDIDATE_RE.finditer(question):
        words = match.group(0).split()
        while words and words[0].lower() in QUESTION_WORDS:
            words = words[1:]
        if len(words) < 2:
            continue
        if any(word.lower() in NON_SUBJECT_WORDS for word in words):
            continue

        candidate = " ".join(words)
        if candidate.lower() in ignored:
            continue
        return candidate
    return None
