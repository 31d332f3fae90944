import pytest

from chatbot.metrics import DEFAULT_CATALOG
from chatbot.query_validator import QueryGuardrails
from chatbot.templates import CypherQueryBuilder
from chatbot.types import ExtractionResult, QuestionAnalysis, SubjectType, TimeFrame, TimeFrameType


ALLOWED_LABELS = {"Player", "MatchDetail", "Fixture", "PLAYED_IN", "HAS_MATCH_DETAILS"}


def _player_analysis(metrics: list[str], **extraction: object) -> QuestionAnalysis:
    return QuestionAnalysis(
        type=SubjectType.PLAYER,
        entities=["Luke Bangs"],
        metrics=metrics,
        extraction_result=ExtractionResult(**extraction),
    )


@pytest.fixture
def builder() -> CypherQueryBuilder:
    return CypherQueryBuilder()


def test_player_goals_plan(builder: CypherQueryBuilder) -> None:
    plans = builder.build(_player_analysis(["G"]))

    assert len(plans) == 1
    plan = plans[0]
    assert "MATCH (p:Player {playerName: $playerName})-[:PLAYED_IN]->(md:MatchDetail)" in plan.query
    assert "count(md) AS appearances" in plan.query
    assert "Fixture" not in plan.query
    assert plan.params == {"playerName": "Luke Bangs"}
    assert plan.columns == {"G": "value_0"}


def test_values_never_appear_in_query_text(builder: CypherQueryBuilder) -> None:
    analysis = _player_analysis(["G"], oppositions=["Old Boys"], team_entities=["3rd XI"])

    plan = builder.build(analysis)[0]

    assert "Luke Bangs" not in plan.query
    assert "Old Boys" not in plan.query
    assert plan.params["opposition"] == "Old Boys"
    assert plan.params["teams"] == ["3RD XI"]


def test_season_filter_joins_fixtures(builder: CypherQueryBuilder) -> None:
    analysis = _player_analysis(["G"], time_frames=[TimeFrame(TimeFrameType.SEASON, "2016/17")])

    plan = builder.build(analysis)[0]

    assert "MATCH (f:Fixture)-[:HAS_MATCH_DETAILS]->(md)" in plan.query
    assert "f.season = $season" in plan.query
    assert plan.params["season"] == "2016/17"


@pytest.mark.parametrize(
    "frame,clause,params",
    [
        (TimeFrame(TimeFrameType.BEFORE, "2019", end="2019-01-01"), "md.date < $beforeDate", {"beforeDate": "2019-01-01"}),
        (TimeFrame(TimeFrameType.SINCE, "2020", start="2021-01-01"), "md.date >= $sinceDate", {"sinceDate": "2021-01-01"}),
        (
            TimeFrame(TimeFrameType.RANGE, "2021 to 2022", start="2021-01-01", end="2022-12-31"),
            "md.date <= $endDate",
            {"startDate": "2021-01-01", "endDate": "2022-12-31"},
        ),
    ],
)
def test_date_bounded_frames(builder: CypherQueryBuilder, frame: TimeFrame, clause: str, params: dict) -> None:
    plan = builder.build(_player_analysis(["A"], time_frames=[frame]))[0]

    assert clause in plan.query
    for name, value in params.items():
        assert plan.params[name] == value


def test_single_date_filter(builder: CypherQueryBuilder) -> None:
    plan = builder.build(_player_analysis(["G"], single_date="2019-09-14"))[0]

    assert "md.date = $onDate" in plan.query
    assert plan.params["onDate"] == "2019-09-14"


def test_multiple_metrics_share_one_read(builder: CypherQueryBuilder) -> None:
    plans = builder.build(_player_analysis(["G", "A"]))

    assert len(plans) == 1
    assert plans[0].columns == {"G": "value_0", "A": "value_1"}
    assert plans[0].metrics == ["G", "A"]


def test_location_metric_ignores_location_filter(builder: CypherQueryBuilder) -> None:
    plans = builder.build(_player_analysis(["HomeGames", "G"], locations=["home"]))

    assert len(plans) == 2
    home_plan = next(plan for plan in plans if plan.metrics == ["HomeGames"])
    goals_plan = next(plan for plan in plans if plan.metrics == ["G"])
    assert "$location" not in home_plan.query
    assert "Location filter omitted for HomeGames." in home_plan.notes
    assert goals_plan.params["location"] == "Home"


def test_home_and_away_together_drop_location_filter(builder: CypherQueryBuilder) -> None:
    plan = builder.build(_player_analysis(["G"], locations=["home", "away"]))[0]

    assert "$location" not in plan.query
    assert any("Home and away" in note for note in plan.notes)


def test_team_scope_uses_upper_case_squad(builder: CypherQueryBuilder) -> None:
    analysis = QuestionAnalysis(type=SubjectType.TEAM, entities=["4th XI"], metrics=["G"])

    plan = builder.build(analysis)[0]

    assert "toUpper(md.team) = $team" in plan.query
    assert plan.params["team"] == "4TH XI"
    assert "Player" not in plan.query


def test_club_scope_needs_no_entity(builder: CypherQueryBuilder) -> None:
    analysis = QuestionAnalysis(type=SubjectType.CLUB, metrics=["G"])

    plan = builder.build(analysis)[0]

    assert plan.query.startswith("MATCH (md:MatchDetail)")
    assert plan.params == {}


def test_squad_appearances_count_by_team(builder: CypherQueryBuilder) -> None:
    plan = builder.build(_player_analysis(["4sApps"], team_entities=["4th XI"]))[0]

    assert "sum(CASE WHEN toUpper(md.team) = $squad_0 THEN 1 ELSE 0 END)" in plan.query
    assert plan.params["squad_0"] == "4TH XI"
    assert "$teams" not in plan.query


def test_team_affiliation_has_its_own_plan(builder: CypherQueryBuilder) -> None:
    plans = builder.build(_player_analysis(["G", "MostPlayedForTeam"]))

    assert [plan.metrics for plan in plans] == [["G"], ["MostPlayedForTeam"]]
    affiliation = plans[1]
    assert affiliation.columns == {"MostPlayedForTeam": "value"}
    assert "ORDER BY total DESC, value ASC" in affiliation.query
    assert affiliation.query.endswith("LIMIT 1")


@pytest.mark.parametrize(
    "analysis",
    [
        QuestionAnalysis(type=SubjectType.UNKNOWN, metrics=["G"]),
        QuestionAnalysis(type=SubjectType.PLAYER, entities=["Luke Bangs"]),
        QuestionAnalysis(type=SubjectType.PLAYER, metrics=["G"]),
        QuestionAnalysis(type=SubjectType.PLAYER, entities=["Luke Bangs"], metrics=["NOT_A_METRIC"]),
    ],
)
def test_nothing_to_query(builder: CypherQueryBuilder, analysis: QuestionAnalysis) -> None:
    assert builder.build(analysis) == []


@pytest.mark.parametrize("key", [definition.key for definition in DEFAULT_CATALOG])
def test_every_metric_plan_passes_guardrails(builder: CypherQueryBuilder, key: str) -> None:
    guardrails = QueryGuardrails(allowed_labels=ALLOWED_LABELS, max_rows=100)
    analysis = _player_analysis(
        [key],
        time_frames=[TimeFrame(TimeFrameType.SEASON, "2021/22")],
        locations=["away"],
        team_exclusions=["3rd XI"],
        competition_types=["League"],
        results=["W"],
        positions=["MID"],
    )

    plans = builder.build(analysis)

    assert plans
    for plan in plans:
        guardrails.validate_and_rewrite(plan.query, plan.params)
