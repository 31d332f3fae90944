from __future__ import annotations

import math
import re
from dataclasses import dataclass


ZERO_EPSILON = 1e-6


@dataclass(frozen=True)
class ZeroStatRule:
    id: str
    matcher: re.Pattern[str]
    phrase: str

    def matches(self, metric_key: str) -> bool:
        return self.matcher.fullmatch(metric_key) is not None


def _rule(rule_id: str, pattern: str, phrase: str) -> ZeroStatRule:
    return ZeroStatRule(id=rule_id, matcher=re.compile(pattern, re.IGNORECASE), phrase=phrase)


# Order matters: the first matching rule wins.
DEFAULT_ZERO_RULES: list[ZeroStatRule] = [
    _rule("HOME_GAMES_ZERO", r"HomeGames", "has not played a home game"),
    _rule("AWAY_GAMES_ZERO", r"AwayGames", "has not played an away game"),
    _rule("HOME_WINS_ZERO", r"HomeWins", "has not won a home game"),
    _rule("AWAY_WINS_ZERO", r"AwayWins", "has not won an away game"),
    _rule("APPS_ZERO", r"APP|APPS|APPEARANCES|MostPlayedForTeam", "has not made an appearance yet"),
    _rule("GOALS_ZERO", r"G|AllGSC|OPENPLAYGOALS|MostScoredForTeam", "has not scored a goal"),
    _rule("ASSISTS_ZERO", r"A", "has not recorded an assist"),
    _rule("GOAL_INVOLVEMENTS_ZERO", r"GI", "has not been involved in a goal"),
    _rule("MOM_ZERO", r"MOM", "has not received a Player of the Match award"),
    _rule("YELLOW_CARDS_ZERO", r"Y", "has not received a yellow card"),
    _rule("RED_CARDS_ZERO", r"R", "has not received a red card"),
    _rule("OWN_GOALS_ZERO", r"OG", "has not scored an own goal"),
    _rule("CLEAN_SHEETS_ZERO", r"CLS", "has not kept a clean sheet"),
    _rule("SAVES_ZERO", r"SAVES", "has not made a save"),
    _rule("PENALTIES_SCORED_ZERO", r"PSC", "has not scored a penalty"),
    _rule("PENALTIES_SAVED_ZERO", r"PSV", "has not saved a penalty"),
    _rule("PENALTIES_MISSED_ZERO", r"PM", "has not missed a penalty"),
    _rule("PENALTIES_CONCEDED_ZERO", r"PCO", "has not conceded a penalty"),
    _rule("CONCEDED_ZERO", r"C", "has not conceded a goal"),
    _rule("MINUTES_ZERO", r"MIN", "has not played any minutes yet"),
    _rule("FANTASY_POINTS_ZERO", r"FTP", "has not recorded any fantasy points"),
    _rule("DISTANCE_ZERO", r"DIST", "has not travelled to a game"),
]


# Phrases used in place of the canonical rule when the question carried a season or range.
SEASON_ZERO_PHRASES = {
    "APP": "didn't make an appearance in the {season} season",
    "G": "didn't score in the {season} season",
}

RANGE_ZERO_PHRASES = {
    "APP": "didn't make an appearance between {start} and {end}",
    "G": "didn't score between {start} and {end}",
}


def is_zero(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if isinstance(value, float) and math.isnan(value):
        return False
    return abs(value) <= ZERO_EPSILON


class ZeroStatRuleEngine:
    def __init__(self, rules: list[ZeroStatRule] | None = None):
        self.rules = list(rules if rules is not None else DEFAULT_ZERO_RULES)

    def find(self, metric_key: str) -> ZeroStatRule | None:
        for rule in self.rules:
            if rule.matches(metric_key):
                return rule
        return None

    def phrase_for(self, metric_key: str) -> str | None:
        rule = self.find(metric_key)
        return rule.phrase if rule else None

    def render(self, subject: str, metric_key: str) -> str | None:
        phrase = self.phrase_for(metric_key)
        if phrase is None:
            return None
        return f"{subject} {phrase}."

    def render_seasonal(self, subject: str, metric_key: str, season: str) -> str | None:
        template = SEASON_ZERO_PHRASES.get(metric_key)
        if template is None:
            return None
        return f"{subject} {template.format(season=season)}."

    def render_ranged(self, subject: str, metric_key: str, start: str, end: str) -> str | None:
        template = RANGE_ZERO_PHRASES.get(metric_key)
        if template is None:
            return None
        return f"{subject} {template.format(start=start, end=end)}."


DEFAULT_ZERO_ENGINE = ZeroStatRuleEngine()
