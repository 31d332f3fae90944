from __future__ import annotations

import logging
from typing import Any, Callable

from .entities import squad_display
from .formatting import as_number, display_date, format_value
from .metrics import DEFAULT_CATALOG, MetricCatalog, MetricDefinition, MetricFamily
from .types import QuestionAnalysis, SubjectType, TimeFrameType
from .zero_stats import DEFAULT_ZERO_ENGINE, ZeroStatRuleEngine, is_zero


logger = logging.getLogger(__name__)

Renderer = Callable[[str, MetricDefinition, Any, QuestionAnalysis], str]

LOCATION_CLAUSES = {
    "home": " whilst playing at home",
    "away": " whilst playing away",
}


def _elide_verb(metric_name: str, verb: str) -> str:
    words = [word for word in metric_name.split() if word.lower() != verb.lower()]
    return " ".join(words) if words else metric_name


class ResponseBuilder:
    def __init__(
        self,
        catalog: MetricCatalog = DEFAULT_CATALOG,
        zero_rules: ZeroStatRuleEngine = DEFAULT_ZERO_ENGINE,
    ):
        self.catalog = catalog
        self.zero_rules = zero_rules
        self.renderers: dict[MetricFamily, Renderer] = {
            MetricFamily.TEAM_AFFILIATION: self._render_team_affiliation,
            MetricFamily.PER_APPEARANCE: self._render_template,
            MetricFamily.PERCENTAGE: self._render_template,
            MetricFamily.TEAM_APPEARANCES: self._render_team_appearances,
        }

    def build(
        self,
        subject: str,
        metric: str,
        value: Any,
        analysis: QuestionAnalysis,
        appearances: int | None = None,
    ) -> str:
        definition = self.catalog.resolve(metric)
        if definition is None:
            logger.debug("No catalog entry for metric %s", metric)
            if value is None:
                return f"{subject} has no recorded {metric}."
            return f"{subject} has {value} {metric}."

        renderer = self.renderers.get(definition.family)
        if renderer is not None:
            return renderer(subject, definition, value, analysis)

        number = as_number(value)
        if value is None:
            number = 0
        if is_zero(number):
            zero_sentence = self._render_zero(subject, definition, analysis)
            if zero_sentence is not None:
                return zero_sentence

        return self._render_default(subject, definition, value if number is None else number, analysis, appearances)

    def _render_team_affiliation(
        self,
        subject: str,
        definition: MetricDefinition,
        value: Any,
        analysis: QuestionAnalysis,
    ) -> str:
        if value is None or not str(value).strip():
            return self.zero_rules.render(subject, definition.key) or f"{subject} has no recorded games."
        return (definition.template or "{subject} has {value}.").format(
            subject=subject,
            value=format_value(definition, value),
        )

    def _render_template(
        self,
        subject: str,
        definition: MetricDefinition,
        value: Any,
        analysis: QuestionAnalysis,
    ) -> str:
        number = as_number(value)
        formatted = format_value(definition, 0 if number is None else number)
        return (definition.template or "{subject} has {value}.").format(subject=subject, value=formatted)

    def _render_team_appearances(
        self,
        subject: str,
        definition: MetricDefinition,
        value: Any,
        analysis: QuestionAnalysis,
    ) -> str:
        squad = squad_display(definition.squad or "")
        number = as_number(value)
        if number is None or is_zero(number):
            return f"{subject} has not made an appearance for the {squad}."
        return f"{subject} has {format_value(definition, number)} {definition.display_name(number)} for the {squad}."

    def _render_zero(self, subject: str, definition: MetricDefinition, analysis: QuestionAnalysis) -> str | None:
        season = analysis.time_frame(TimeFrameType.SEASON)
        if season is not None:
            sentence = self.zero_rules.render_seasonal(subject, definition.key, season.value)
            if sentence:
                return sentence

        span = self._range_bounds(analysis)
        if span is not None:
            sentence = self.zero_rules.render_ranged(subject, definition.key, *span)
            if sentence:
                return sentence

        return self.zero_rules.render(subject, definition.key)

    def _range_bounds(self, analysis: QuestionAnalysis) -> tuple[str, str] | None:
        frame = analysis.time_frame(TimeFrameType.RANGE)
        if frame is not None:
            first, _, last = frame.value.partition(" to ")
            return first, last

        frame = analysis.time_frame(TimeFrameType.BETWEEN)
        if frame is not None and frame.start and frame.end:
            return display_date(frame.start), display_date(frame.end)
        return None

    def _render_default(
        self,
        subject: str,
        definition: MetricDefinition,
        value: Any,
        analysis: QuestionAnalysis,
        appearances: int | None,
    ) -> str:
        verb = definition.verb
        metric_name = _elide_verb(definition.display_name(value), verb)
        sentence = f"{subject} has {verb} {format_value(definition, value)} {metric_name}"

        if (
            appearances
            and definition.with_appearances
            and analysis.type == SubjectType.PLAYER
        ):
            noun = "appearance" if appearances == 1 else "appearances"
            sentence += f" in {appearances} {noun}"

        return sentence + self._context_clauses(definition, analysis) + "."

    def _context_clauses(self, definition: MetricDefinition, analysis: QuestionAnalysis) -> str:
        extraction = analysis.extraction_result
        clauses: list[str] = []

        if analysis.type == SubjectType.PLAYER and extraction.team_entities:
            clauses.append(f" for the {' and '.join(extraction.team_entities)}")

        if extraction.team_exclusions:
            excluded = " or ".join(squad_display(team) for team in extraction.team_exclusions)
            clauses.append(f" when not playing for the {excluded}")

        if definition.location is None and len(extraction.locations) == 1:
            clauses.append(LOCATION_CLAUSES[extraction.locations[0]])

        if extraction.oppositions:
            clauses.append(f" against {extraction.oppositions[0]}")

        clauses.append(self._date_clause(analysis))
        return "".join(clauses)

    def _date_clause(self, analysis: QuestionAnalysis) -> str:
        before = analysis.time_frame(TimeFrameType.BEFORE)
        if before is not None:
            if "/" in before.value:
                return f" before the {before.value} season"
            return f" before {before.value}"

        since = analysis.time_frame(TimeFrameType.SINCE)
        if since is not None:
            if "/" in since.value:
                return f" since the {since.value} season"
            return f" since {display_date(since.start or since.value)}"

        span = self._range_bounds(analysis)
        if span is not None:
            return f" between {span[0]} and {span[1]}"

        season = analysis.time_frame(TimeFrameType.SEASON)
        if season is not None:
            return f" in the {season.value} season"

        if analysis.time_range:
            if " to " in analysis.time_range:
                first, _, last = analysis.time_range.partition(" to ")
                return f" between {display_date(first)} and {display_date(last)}"
            return f" on {display_date(analysis.time_range)}"
        return ""


def extract_sources(analysis: QuestionAnalysis) -> list[str]:
    extraction = analysis.extraction_result
    sources = ["Neo4j Database"]

    season = analysis.time_frame(TimeFrameType.SEASON)
    if season is not None:
        sources.append(f"Season: {season.value}")
    elif analysis.time_range:
        sources.append(f"Time period: {analysis.time_range}")

    for team in extraction.team_entities:
        sources.append(f"Team: {team}")
    for location in extraction.locations:
        sources.append(f"Location: {location}")
    return sources
