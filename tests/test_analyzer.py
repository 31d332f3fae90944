import pytest

from chatbot.analyzer import QuestionAnalyzer
from chatbot.types import QuestionContext, SubjectType, TimeFrameType


@pytest.fixture
def analyzer() -> QuestionAnalyzer:
    return QuestionAnalyzer(["Luke Bangs", "Oli Goddard"])


def test_player_question(analyzer: QuestionAnalyzer) -> None:
    analysis = analyzer.analyze(QuestionContext("How many goals has Luke Bangs scored in the 2016/17 season?"))

    assert analysis.type == SubjectType.PLAYER
    assert analysis.entities == ["Luke Bangs"]
    assert analysis.metrics == ["G"]
    assert analysis.time_range == "2016/17"
    assert analysis.time_frame(TimeFrameType.SEASON).value == "2016/17"


def test_user_context_names_the_player(analyzer: QuestionAnalyzer) -> None:
    analysis = analyzer.analyze(QuestionContext("How many goals has he scored?", user_context="luke  bangs"))

    assert analysis.type == SubjectType.PLAYER
    assert analysis.entities == ["Luke Bangs"]


def test_unknown_user_context_is_kept_for_the_not_found_reply(analyzer: QuestionAnalyzer) -> None:
    analysis = analyzer.analyze(QuestionContext("How many goals has he scored?", user_context="Joe Bloggs"))

    assert analysis.type == SubjectType.UNKNOWN
    assert analysis.unresolved_subject == "Joe Bloggs"


def test_two_players_are_ambiguous(analyzer: QuestionAnalyzer) -> None:
    analysis = analyzer.analyze(QuestionContext("Has Luke Bangs scored more goals than Oli Goddard?"))

    assert analysis.type == SubjectType.UNKNOWN
    assert analysis.entities == []
    assert analysis.ambiguities


def test_club_and_team_subjects(analyzer: QuestionAnalyzer) -> None:
    club = analyzer.analyze(QuestionContext("How many goals has the club scored since 2020?"))
    team = analyzer.analyze(QuestionContext("How many goals have the 4s scored?"))

    assert club.type == SubjectType.CLUB
    assert club.entities == []
    assert team.type == SubjectType.TEAM
    assert team.entities == ["4th XI"]


def test_unknown_name_is_recorded(analyzer: QuestionAnalyzer) -> None:
    analysis = analyzer.analyze(QuestionContext("How many goals has Joe Bloggs scored?"))

    assert analysis.type == SubjectType.UNKNOWN
    assert analysis.unresolved_subject == "Joe Bloggs"


def test_squad_appearances_replace_plain_appearances(analyzer: QuestionAnalyzer) -> None:
    analysis = analyzer.analyze(QuestionContext("How many appearances has Luke Bangs made for the 4s?"))

    assert analysis.metrics == ["4sApps"]
    assert analysis.extraction_result.team_entities == ["4th XI"]


def test_team_exclusion_keeps_plain_appearances(analyzer: QuestionAnalyzer) -> None:
    analysis = analyzer.analyze(
        QuestionContext("How many appearances has Luke Bangs made when not playing for the 3s?")
    )

    assert analysis.metrics == ["APP"]
    assert analysis.extraction_result.team_exclusions == ["3rd XI"]


def test_single_date_is_kept_on_the_extraction(analyzer: QuestionAnalyzer) -> None:
    analysis = analyzer.analyze(QuestionContext("How many goals did Luke Bangs score on 14/09/2019?"))

    assert analysis.time_range == "2019-09-14"
    assert analysis.extraction_result.single_date == "2019-09-14"
    assert analysis.extraction_result.time_frames == []


def test_analysis_failure_returns_unknown(analyzer: QuestionAnalyzer, monkeypatch: pytest.MonkeyPatch) -> None:
    def boom(context: QuestionContext):
        raise RuntimeError("boom")

    monkeypatch.setattr(analyzer, "_analyze", boom)

    analysis = analyzer.analyze(QuestionContext("How many goals has Luke Bangs scored?"))

    assert analysis.type == SubjectType.UNKNOWN
    assert analysis.metrics == []
