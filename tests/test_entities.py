import pytest

from chatbot.entities import SubjectMatcher, canonical_squad, squad_display


@pytest.fixture
def matcher() -> SubjectMatcher:
    return SubjectMatcher(["Luke Bangs", "Oli Goddard", "Luke", "  ", ""])


@pytest.mark.parametrize(
    "token,expected",
    [
        ("4s", "4th XI"),
        ("4th", "4th XI"),
        ("4th XI", "4th XI"),
        ("fourth team", "4th XI"),
        ("First", "1st XI"),
        ("2nd xi", "2nd XI"),
        ("9s", None),
        ("vets", None),
    ],
)
def test_canonical_squad(token: str, expected: str | None) -> None:
    assert canonical_squad(token) == expected


def test_squad_display() -> None:
    assert squad_display("4th XI") == "4s"
    assert squad_display("Vets") == "Vets"


def test_lookup_is_case_and_space_insensitive(matcher: SubjectMatcher) -> None:
    assert matcher.lookup("luke   BANGS") == "Luke Bangs"
    assert matcher.lookup("Luke Bang") is None


def test_find_prefers_longest_name(matcher: SubjectMatcher) -> None:
    matches = matcher.find("How many goals has luke bangs scored?")

    assert [match.name for match in matches] == ["Luke Bangs"]


def test_find_respects_word_boundaries(matcher: SubjectMatcher) -> None:
    assert matcher.find("How many goals has Lukewarm scored?") == []


def test_distinct_names_keeps_question_order(matcher: SubjectMatcher) -> None:
    question = "Has Oli Goddard or Luke Bangs scored more? Oli Goddard surely."

    assert matcher.distinct_names(question) == ["Oli Goddard", "Luke Bangs"]
