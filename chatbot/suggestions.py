from __future__ import annotations

from rapidfuzz import fuzz, process

from .metrics import DEFAULT_CATALOG, MetricCatalog
from .types import QuestionAnalysis


EXAMPLE_QUESTIONS = [
    "How many goals has [player] scored?",
    "How many appearances has [player] made?",
    "How many assists has [player] provided?",
    "How many clean sheets has [player] kept?",
    "How many yellow cards has [player] received?",
    "How many Player of the Match awards has [player] won?",
    "How many goals has [player] scored in the 2021/22 season?",
    "How many goals has [player] scored at home?",
    "How many appearances has [player] made for the 4s?",
    "Which team has [player] played for most?",
    "What is [player]'s win percentage?",
    "How many goals per appearance does [player] average?",
    "How many goals have the 1s scored?",
    "How many goals has the club scored since 2020?",
]

PLACEHOLDER = "[player]"


class QuestionSuggester:
    def __init__(
        self,
        examples: list[str] | None = None,
        catalog: MetricCatalog = DEFAULT_CATALOG,
        limit: int = 3,
    ):
        self.examples = list(examples or EXAMPLE_QUESTIONS)
        self.catalog = catalog
        self.limit = limit

    def suggest(self, question: str, subject: str | None = None) -> list[str]:
        if not question.strip():
            matches = [(example, 0.0, index) for index, example in enumerate(self.examples[: self.limit])]
        else:
            matches = process.extract(
                question,
                self.examples,
                scorer=fuzz.WRatio,
                limit=self.limit,
            )

        replacement = subject or "[player name]"
        return [example.replace(PLACEHOLDER, replacement) for example, _score, _index in matches]

    def clarification(self, analysis: QuestionAnalysis) -> str:
        if analysis.entities and not analysis.metrics:
            return (
                f"I found {', '.join(analysis.entities)} in your question, but I'm not sure what "
                f"statistic you're looking for. Try asking something like "
                f"'How many goals has {analysis.entities[0]} scored?'"
            )

        if analysis.metrics and not analysis.entities:
            definition = self.catalog.get(analysis.metrics[0])
            metric_name = definition.plural if definition else "goals"
            return (
                "I'm not sure which player or team you're asking about. Try asking something like "
                f"'How many {metric_name} has [player name] got?'"
            )

        return (
            "I couldn't understand that. Try asking about a specific stat, for example "
            "'How many goals has [player name] scored?'"
        )
