import re

import pytest

from chatbot.zero_stats import ZeroStatRule, ZeroStatRuleEngine, is_zero


@pytest.fixture
def engine() -> ZeroStatRuleEngine:
    return ZeroStatRuleEngine()


@pytest.mark.parametrize(
    "metric,rule_id",
    [
        ("APP", "APPS_ZERO"),
        ("G", "GOALS_ZERO"),
        ("OPENPLAYGOALS", "GOALS_ZERO"),
        ("A", "ASSISTS_ZERO"),
        ("HomeGames", "HOME_GAMES_ZERO"),
        ("PSV", "PENALTIES_SAVED_ZERO"),
    ],
)
def test_rule_lookup(engine: ZeroStatRuleEngine, metric: str, rule_id: str) -> None:
    rule = engine.find(metric)

    assert rule is not None
    assert rule.id == rule_id


@pytest.mark.parametrize("metric", ["GperAPP", "CperAPP", "MperCLS", "Games%Won", "4sApps", "GOALS", "XYZ"])
def test_matchers_cover_the_whole_key(engine: ZeroStatRuleEngine, metric: str) -> None:
    assert engine.find(metric) is None


def test_first_matching_rule_wins() -> None:
    engine = ZeroStatRuleEngine(
        rules=[
            ZeroStatRule(id="FIRST", matcher=re.compile(r"G|A"), phrase="first phrase"),
            ZeroStatRule(id="SECOND", matcher=re.compile(r"G"), phrase="second phrase"),
        ]
    )

    assert engine.render("Luke Bangs", "G") == "Luke Bangs first phrase."


def test_render_uses_canonical_phrase(engine: ZeroStatRuleEngine) -> None:
    assert engine.render("Luke Bangs", "A") == "Luke Bangs has not recorded an assist."
    assert engine.render("Luke Bangs", "XYZ") is None


def test_seasonal_and_ranged_phrases(engine: ZeroStatRuleEngine) -> None:
    assert engine.render_seasonal("Luke Bangs", "G", "2016/17") == "Luke Bangs didn't score in the 2016/17 season."
    assert (
        engine.render_ranged("Luke Bangs", "APP", "2021", "2022")
        == "Luke Bangs didn't make an appearance between 2021 and 2022."
    )
    assert engine.render_seasonal("Luke Bangs", "A", "2016/17") is None


@pytest.mark.parametrize(
    "value,expected",
    [
        (0, True),
        (0.0, True),
        (1e-9, True),
        (0.01, False),
        (3, False),
        (None, False),
        (True, False),
        ("0", False),
    ],
)
def test_is_zero(value: object, expected: bool) -> None:
    assert is_zero(value) is expected
