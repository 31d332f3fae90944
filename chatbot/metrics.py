from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator


class MetricFormat(str, Enum):
    INTEGER = "integer"
    DECIMAL1 = "decimal1"
    DECIMAL2 = "decimal2"
    PERCENTAGE = "percentage"
    STRING = "string"


class MetricFamily(str, Enum):
    COUNT = "count"
    TEAM_AFFILIATION = "team_affiliation"
    PER_APPEARANCE = "per_appearance"
    PERCENTAGE = "percentage"
    TEAM_APPEARANCES = "team_appearances"


VERB_BY_CATEGORY = {
    "appearance": "made",
    "games": "played",
    "wins": "won",
    "time": "played",
    "award": "won",
    "scoring": "scored",
    "creative": "provided",
    "involvement": "had",
    "discipline": "received",
    "goalkeeping": "made",
    "conceding": "conceded",
    "clean_sheet": "kept",
    "penalty_missed": "missed",
    "penalty_saved": "saved",
    "fantasy": "earned",
    "distance": "travelled",
}

SQUAD_ORDINALS = ["1st", "2nd", "3rd", "4th", "5th", "6th", "7th", "8th"]


@dataclass(frozen=True)
class MetricDefinition:
    key: str
    singular: str
    plural: str
    aliases: tuple[str, ...]
    category: str
    format: MetricFormat = MetricFormat.INTEGER
    family: MetricFamily = MetricFamily.COUNT
    template: str | None = None
    unit: str | None = None
    decimals: int = 0
    location: str | None = None
    squad: str | None = None
    with_appearances: bool = True

    def display_name(self, value: object) -> str:
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value == 1:
            return self.singular
        return self.plural

    @property
    def verb(self) -> str:
        return VERB_BY_CATEGORY[self.category]


def _metric(
    key: str,
    singular: str,
    plural: str,
    aliases: list[str],
    category: str,
    **options,
) -> MetricDefinition:
    return MetricDefinition(
        key=key,
        singular=singular,
        plural=plural,
        aliases=tuple(alias.lower() for alias in aliases),
        category=category,
        **options,
    )


def _squad_appearance_metrics() -> list[MetricDefinition]:
    metrics: list[MetricDefinition] = []
    for number, ordinal in enumerate(SQUAD_ORDINALS, start=1):
        metrics.append(
            _metric(
                f"{number}sApps",
                "appearance",
                "appearances",
                [
                    f"{number}s apps",
                    f"{number}s appearances",
                    f"{ordinal} xi apps",
                    f"{ordinal} xi appearances",
                ],
                "appearance",
                family=MetricFamily.TEAM_APPEARANCES,
                squad=f"{ordinal} XI",
                with_appearances=False,
            )
        )
    return metrics


DEFAULT_METRICS: list[MetricDefinition] = [
    _metric(
        "APP",
        "appearance",
        "appearances",
        ["appearances", "appearance", "apps", "games played", "matches played", "games", "matches"],
        "appearance",
        with_appearances=False,
    ),
    _metric("MIN", "minute", "minutes", ["minutes played", "minutes", "mins"], "time"),
    _metric(
        "MOM",
        "Player of the Match award",
        "Player of the Match awards",
        [
            "player of the match awards",
            "player of the match",
            "man of the match awards",
            "man of the match",
            "potm",
            "motm",
            "moms",
        ],
        "award",
    ),
    _metric(
        "G",
        "goal",
        "goals",
        ["goals scored", "total goals", "all goals", "goals", "goal", "allgsc"],
        "scoring",
    ),
    _metric(
        "OPENPLAYGOALS",
        "open play goal",
        "open play goals",
        ["open play goals", "open-play goals", "non-penalty goals"],
        "scoring",
    ),
    _metric("A", "assist", "assists", ["assists", "assist"], "creative"),
    _metric(
        "GI",
        "goal involvement",
        "goal involvements",
        ["goal involvements", "goal involvement", "goal contributions"],
        "involvement",
    ),
    _metric("Y", "yellow card", "yellow cards", ["yellow cards", "yellow card", "yellows", "bookings"], "discipline"),
    _metric("R", "red card", "red cards", ["red cards", "red card", "sent off", "dismissals"], "discipline"),
    _metric("SAVES", "save", "saves", ["saves", "save"], "goalkeeping"),
    _metric("OG", "own goal", "own goals", ["own goals", "own goal"], "scoring"),
    _metric(
        "C",
        "goal conceded",
        "goals conceded",
        ["goals conceded", "goal conceded", "conceded"],
        "conceding",
    ),
    _metric("CLS", "clean sheet", "clean sheets", ["clean sheets", "clean sheet", "shutouts"], "clean_sheet"),
    _metric(
        "PSC",
        "penalty scored",
        "penalties scored",
        ["penalties scored", "penalty goals", "pens scored", "penalties converted"],
        "scoring",
    ),
    _metric("PM", "penalty missed", "penalties missed", ["penalties missed", "missed penalties", "pens missed"], "penalty_missed"),
    _metric("PCO", "penalty conceded", "penalties conceded", ["penalties conceded", "pens conceded"], "conceding"),
    _metric("PSV", "penalty saved", "penalties saved", ["penalties saved", "penalty saves", "pens saved"], "penalty_saved"),
    _metric("FTP", "fantasy point", "fantasy points", ["fantasy points", "fantasy point", "fantasy score"], "fantasy"),
    _metric(
        "DIST",
        "mile",
        "miles",
        ["distance travelled", "miles travelled", "distance"],
        "distance",
        format=MetricFormat.DECIMAL1,
        unit="miles",
    ),
    _metric(
        "HomeGames",
        "home game",
        "home games",
        ["home games", "home matches", "home appearances"],
        "games",
        location="home",
        with_appearances=False,
    ),
    _metric(
        "AwayGames",
        "away game",
        "away games",
        ["away games", "away matches", "away appearances"],
        "games",
        location="away",
        with_appearances=False,
    ),
    _metric(
        "HomeWins",
        "home game",
        "home games",
        ["home wins", "home games won", "home victories"],
        "wins",
        location="home",
        with_appearances=False,
    ),
    _metric(
        "AwayWins",
        "away game",
        "away games",
        ["away wins", "away games won", "away victories"],
        "wins",
        location="away",
        with_appearances=False,
    ),
    _metric(
        "GperAPP",
        "goal per appearance",
        "goals per appearance",
        ["goals per appearance", "goals per game", "goals per match"],
        "scoring",
        format=MetricFormat.DECIMAL2,
        family=MetricFamily.PER_APPEARANCE,
        template="{subject} averages {value} goals per appearance.",
    ),
    _metric(
        "CperAPP",
        "goal conceded per appearance",
        "goals conceded per appearance",
        ["goals conceded per appearance", "goals conceded per game", "goals conceded per match", "conceded per game"],
        "conceding",
        format=MetricFormat.DECIMAL2,
        family=MetricFamily.PER_APPEARANCE,
        template="{subject} has averaged {value} goals conceded per appearance.",
    ),
    _metric(
        "FTPperAPP",
        "fantasy point per appearance",
        "fantasy points per appearance",
        ["fantasy points per appearance", "fantasy points per game", "fantasy points per match"],
        "fantasy",
        format=MetricFormat.DECIMAL2,
        family=MetricFamily.PER_APPEARANCE,
        template="{subject} averages {value} fantasy points per appearance.",
    ),
    _metric(
        "MperG",
        "minute per goal",
        "minutes per goal",
        ["minutes per goal"],
        "time",
        format=MetricFormat.DECIMAL1,
        family=MetricFamily.PER_APPEARANCE,
        template="{subject} averages {value} minutes per goal scored.",
    ),
    _metric(
        "MperCLS",
        "minute per clean sheet",
        "minutes per clean sheet",
        ["minutes per clean sheet"],
        "time",
        format=MetricFormat.DECIMAL1,
        family=MetricFamily.PER_APPEARANCE,
        template="{subject} takes on average {value} minutes to keep a clean sheet.",
    ),
    _metric(
        "Games%Won",
        "percentage of games won",
        "percentage of games won",
        ["percentage of games won", "% of games won", "winning percentage", "win percentage", "win rate"],
        "wins",
        format=MetricFormat.PERCENTAGE,
        family=MetricFamily.PERCENTAGE,
        template="{subject} has won {value} of games.",
        decimals=1,
    ),
    _metric(
        "HomeGames%Won",
        "percentage of home games won",
        "percentage of home games won",
        ["percentage of home games won", "% of home games won", "home win percentage", "home win rate"],
        "wins",
        format=MetricFormat.PERCENTAGE,
        family=MetricFamily.PERCENTAGE,
        template="{subject} has won {value} of home games.",
        decimals=1,
        location="home",
    ),
    _metric(
        "AwayGames%Won",
        "percentage of away games won",
        "percentage of away games won",
        ["percentage of away games won", "% of away games won", "away win percentage", "away win rate"],
        "wins",
        format=MetricFormat.PERCENTAGE,
        family=MetricFamily.PERCENTAGE,
        template="{subject} has won {value} of away games.",
        decimals=1,
        location="away",
    ),
    _metric(
        "PenaltyConversionRate",
        "penalty conversion rate",
        "penalty conversion rate",
        ["penalty conversion rate", "penalty conversion", "penalty success rate"],
        "scoring",
        format=MetricFormat.PERCENTAGE,
        family=MetricFamily.PERCENTAGE,
        template="{subject} has a penalty conversion rate of {value}.",
        decimals=1,
    ),
    _metric(
        "MostPlayedForTeam",
        "team played for most",
        "team played for most",
        ["played for the most", "played for most", "played most for", "most played for"],
        "games",
        format=MetricFormat.STRING,
        family=MetricFamily.TEAM_AFFILIATION,
        template="{subject} has played for the {value} most.",
        with_appearances=False,
    ),
    _metric(
        "MostScoredForTeam",
        "team scored for most",
        "team scored for most",
        ["scored the most goals for", "scored most goals for", "scored the most for", "scored most for"],
        "scoring",
        format=MetricFormat.STRING,
        family=MetricFamily.TEAM_AFFILIATION,
        template="{subject} has scored the most goals for the {value}.",
        with_appearances=False,
    ),
    *_squad_appearance_metrics(),
]


@dataclass(frozen=True)
class AliasMatch:
    key: str
    alias: str
    start: int
    end: int


class MetricCatalog:
    """Static registry of every recognised statistic, keyed by canonical key."""

    def __init__(self, definitions: list[MetricDefinition] | None = None):
        self._definitions: dict[str, MetricDefinition] = {}
        self._by_lower_key: dict[str, str] = {}
        self._alias_index: dict[str, str] = {}

        for definition in definitions if definitions is not None else DEFAULT_METRICS:
            self._register(definition)

        self._alias_patterns = [
            (alias, key, re.compile(rf"(?<![\w%]){re.escape(alias)}(?!\w)", re.IGNORECASE))
            for alias, key in sorted(self._alias_index.items(), key=lambda item: (-len(item[0]), item[0]))
        ]

    def _register(self, definition: MetricDefinition) -> None:
        lowered_key = definition.key.lower()
        if lowered_key in self._by_lower_key:
            raise ValueError(f"Duplicate metric key: {definition.key}")

        for alias in definition.aliases:
            owner = self._alias_index.get(alias)
            if owner is not None and owner != definition.key:
                raise ValueError(f"Alias '{alias}' is claimed by both {owner} and {definition.key}")
            self._alias_index[alias] = definition.key

        self._definitions[definition.key] = definition
        self._by_lower_key[lowered_key] = definition.key

    def __iter__(self) -> Iterator[MetricDefinition]:
        return iter(self._definitions.values())

    def __contains__(self, key: object) -> bool:
        return key in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)

    def get(self, key: str) -> MetricDefinition | None:
        return self._definitions.get(key)

    def resolve(self, alias: str) -> MetricDefinition | None:
        cleaned = alias.strip().lower()
        if not cleaned:
            return None

        key = self._by_lower_key.get(cleaned)
        if key is None:
            key = self._alias_index.get(cleaned)
        if key is None:
            return None
        return self._definitions[key]

    def squad_appearance_metric(self, squad: str) -> MetricDefinition | None:
        for definition in self._definitions.values():
            if definition.family == MetricFamily.TEAM_APPEARANCES and definition.squad == squad:
                return definition
        return None

    def find_aliases(self, text: str) -> list[AliasMatch]:
        """Longest aliases claim their span first; shorter overlapping aliases are skipped."""
        claimed: list[tuple[int, int]] = []
        matches: list[AliasMatch] = []

        for alias, key, pattern in self._alias_patterns:
            for match in pattern.finditer(text):
                start, end = match.span()
                if any(start < taken_end and end > taken_start for taken_start, taken_end in claimed):
                    continue
                claimed.append((start, end))
                matches.append(AliasMatch(key=key, alias=alias, start=start, end=end))

        matches.sort(key=lambda item: item.start)
        return matches


DEFAULT_CATALOG = MetricCatalog()
