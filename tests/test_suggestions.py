from chatbot.suggestions import EXAMPLE_QUESTIONS, QuestionSuggester
from chatbot.types import QuestionAnalysis, SubjectType


def test_exact_example_ranks_first() -> None:
    suggester = QuestionSuggester()

    suggestions = suggester.suggest("How many clean sheets has [player] kept?")

    assert suggestions[0] == "How many clean sheets has [player name] kept?"
    assert len(suggestions) == 3


def test_subject_fills_placeholder() -> None:
    suggestions = QuestionSuggester(limit=2).suggest("", subject="Luke Bangs")

    assert suggestions == [
        EXAMPLE_QUESTIONS[0].replace("[player]", "Luke Bangs"),
        EXAMPLE_QUESTIONS[1].replace("[player]", "Luke Bangs"),
    ]


def test_clarification_messages() -> None:
    suggester = QuestionSuggester()

    named = suggester.clarification(QuestionAnalysis(type=SubjectType.PLAYER, entities=["Luke Bangs"]))
    unnamed = suggester.clarification(QuestionAnalysis(type=SubjectType.UNKNOWN, metrics=["A"]))
    unknown = suggester.clarification(QuestionAnalysis(type=SubjectType.UNKNOWN))

    assert named.startswith("I found Luke Bangs in your question")
    assert "'How many assists has [player name] got?'" in unnamed
    assert unknown.startswith("I couldn't understand that.")
