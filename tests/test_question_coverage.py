import pytest

from chatbot.analyzer import QuestionAnalyzer
from chatbot.types import QuestionContext, SubjectType


ANALYZER = QuestionAnalyzer(["Luke Bangs", "Oli Goddard", "Sam Price"])


@pytest.mark.parametrize(
    "question,expected_type,expected_metrics",
    [
        ("How many goals has Luke Bangs scored?", SubjectType.PLAYER, ["G"]),
        ("How many assists has Oli Goddard got?", SubjectType.PLAYER, ["A"]),
        ("How many appearances has Sam Price made?", SubjectType.PLAYER, ["APP"]),
        ("How many clean sheets has Luke Bangs kept?", SubjectType.PLAYER, ["CLS"]),
        ("How many goals has Luke Bangs conceded?", SubjectType.PLAYER, ["C"]),
        ("How many yellow cards has Oli Goddard received?", SubjectType.PLAYER, ["Y"]),
        ("How many times has Sam Price been sent off?", SubjectType.PLAYER, ["R"]),
        ("How many man of the match awards has Luke Bangs won?", SubjectType.PLAYER, ["MOM"]),
        ("How many penalties scored for Oli Goddard?", SubjectType.PLAYER, ["PSC"]),
        ("What are Luke Bangs's goals per game?", SubjectType.PLAYER, ["GperAPP"]),
        ("What is Oli Goddard's win percentage?", SubjectType.PLAYER, ["Games%Won"]),
        ("Which team has Luke Bangs played for most?", SubjectType.PLAYER, ["MostPlayedForTeam"]),
        ("How many home games has Sam Price played?", SubjectType.PLAYER, ["HomeGames"]),
        ("How many fantasy points has Luke Bangs earned?", SubjectType.PLAYER, ["FTP"]),
        ("What distance has Oli Goddard travelled?", SubjectType.PLAYER, ["DIST"]),
        ("How many appearances has Luke Bangs made for the 2nd XI?", SubjectType.PLAYER, ["2sApps"]),
        ("How many goals have the 3s scored?", SubjectType.TEAM, ["G"]),
        ("How many clean sheets has the club kept?", SubjectType.CLUB, ["CLS"]),
        ("How many goals and assists has Sam Price got?", SubjectType.PLAYER, ["G", "A"]),
    ],
)
def test_question_coverage(question: str, expected_type: SubjectType, expected_metrics: list[str]) -> None:
    analysis = ANALYZER.analyze(QuestionContext(question))

    assert analysis.type == expected_type
    assert analysis.metrics == expected_metrics
