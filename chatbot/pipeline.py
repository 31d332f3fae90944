from __future__ import annotations

import logging
import re
from typing import Any

from .analyzer import QuestionAnalyzer
from .config import ChatbotSettings
from .db import Neo4jQueryExecutor, QueryExecutionError
from .metrics import DEFAULT_CATALOG, MetricCatalog
from .query_validator import QueryGuardrails
from .reference import QueryRunner, fetch_subject_names, load_subject_names_from_csv
from .responses import ResponseBuilder, extract_sources
from .suggestions import QuestionSuggester
from .templates import CypherQueryBuilder
from .types import (
    ChatbotResponse,
    ProcessingDetails,
    QueryPlan,
    QuestionAnalysis,
    QuestionContext,
    SubjectType,
    Visualization,
)
from .zero_stats import DEFAULT_ZERO_ENGINE, ZeroStatRuleEngine


logger = logging.getLogger(__name__)

ALLOWED_LABELS = {
    "Player",
    "MatchDetail",
    "Fixture",
    "PLAYED_IN",
    "HAS_MATCH_DETAILS",
}

DISPLAYABLE_NAME_RE = re.compile(r"^[A-Z][A-Za-z'-]*[a-z][A-Za-z'-]*(?: [A-Z][A-Za-z'-]*[a-z][A-Za-z'-]*){0,4}$")
REDACT_RE = re.compile(r"\b(?:bolt|neo4j)(?:\+s|\+ssc)?://\S+", re.IGNORECASE)
SECRET_KEYS = {"password", "neo4j_password", "uri", "neo4j_uri", "auth"}

NOT_FOUND_NAMED = (
    "I couldn't find a player named \"{name}\" in the database. "
    "Please check the spelling or try a different player name."
)
NOT_FOUND_GENERIC = (
    "I couldn't find that player in the database. "
    "Please check the spelling or try a different player name."
)
DATABASE_UNAVAILABLE = (
    "I'm sorry, I'm unable to access the club's database at the moment. Please try again later."
)
PROCESSING_FAILED = (
    "I'm sorry, I encountered an error while processing your question. Please try again later."
)


def _as_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def scrub_debug(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            key: scrub_debug(item)
            for key, item in value.items()
            if str(key).lower() not in SECRET_KEYS
        }
    if isinstance(value, (list, tuple)):
        return [scrub_debug(item) for item in value]
    if isinstance(value, str):
        return REDACT_RE.sub("[redacted]", value).replace("<", "").replace(">", "")
    return value


class ChatbotService:
    def __init__(
        self,
        executor: QueryRunner,
        subject_names: list[str],
        catalog: MetricCatalog = DEFAULT_CATALOG,
        zero_rules: ZeroStatRuleEngine = DEFAULT_ZERO_ENGINE,
        guardrails: QueryGuardrails | None = None,
        suggester: QuestionSuggester | None = None,
        debug: bool = False,
    ):
        self.executor = executor
        self.catalog = catalog
        self.analyzer = QuestionAnalyzer(subject_names, catalog)
        self.query_builder = CypherQueryBuilder(catalog)
        self.response_builder = ResponseBuilder(catalog, zero_rules)
        self.guardrails = guardrails or QueryGuardrails(allowed_labels=ALLOWED_LABELS, max_rows=100)
        self.suggester = suggester or QuestionSuggester(catalog=catalog)
        self.debug = debug

        # Most recent request only; concurrent callers overwrite each other.
        self._last_details = ProcessingDetails(analysis=None)

    @classmethod
    def from_settings(cls, settings: ChatbotSettings) -> ChatbotService:
        executor = Neo4jQueryExecutor(
            uri=settings.neo4j_uri,
            user=settings.neo4j_user,
            password=settings.neo4j_password,
            database=settings.neo4j_database,
            max_retry_time=settings.max_retry_time,
        )

        if settings.subjects_csv:
            subject_names = load_subject_names_from_csv(settings.subjects_csv)
        else:
            subject_names = fetch_subject_names(executor)
        logger.info("Loaded %d subject names", len(subject_names))

        return cls(
            executor=executor,
            subject_names=subject_names,
            guardrails=QueryGuardrails(allowed_labels=ALLOWED_LABELS, max_rows=settings.query_max_rows),
            debug=settings.debug,
        )

    def get_processing_details(self) -> ProcessingDetails:
        return self._last_details

    def process_question(self, context: QuestionContext) -> ChatbotResponse:
        try:
            return self._process(context)
        except QueryExecutionError:
            logger.exception("Graph database unavailable")
            return ChatbotResponse(answer=DATABASE_UNAVAILABLE, confidence=0.0)
        except Exception:
            logger.exception("Failed to process question")
            return ChatbotResponse(answer=PROCESSING_FAILED, confidence=0.0)

    def _process(self, context: QuestionContext) -> ChatbotResponse:
        logger.debug("Question received: %r", context.question)
        analysis = self.analyzer.analyze(context)
        self._last_details = ProcessingDetails(analysis=analysis)

        if not analysis.metrics:
            logger.info("No metric recognised; asking for clarification")
            return self._clarify(context, analysis)

        if analysis.type == SubjectType.UNKNOWN:
            if analysis.unresolved_subject:
                return self._not_found(analysis)
            logger.info("No subject resolved; asking for clarification")
            return self._clarify(context, analysis)

        plans = self.query_builder.build(analysis)
        self._last_details = ProcessingDetails(analysis=analysis, queries=plans)
        if not plans:
            return self._clarify(context, analysis)

        values: dict[str, Any] = {}
        appearances: dict[str, int | None] = {}
        for plan in plans:
            query = self.guardrails.validate_and_rewrite(plan.query, plan.params)
            logger.debug("Running query for metrics %s", plan.metrics)
            result = self.executor.run_query(query, plan.params)

            record = result.records[0] if result.records else {}
            for metric in plan.metrics:
                values[metric] = record.get(plan.columns[metric])
                appearances[metric] = _as_int(record.get("appearances"))

        subject = self._subject_label(analysis)
        sentences = [
            self.response_builder.build(
                subject,
                metric,
                values.get(metric),
                analysis,
                appearances=appearances.get(metric),
            )
            for metric in analysis.metrics
            if metric in values
        ]

        return ChatbotResponse(
            answer=" ".join(sentences),
            confidence=0.9,
            visualization=self._visualization(subject, analysis, values),
            sources=extract_sources(analysis),
            debug=self._debug_payload(analysis, plans),
        )

    def _subject_label(self, analysis: QuestionAnalysis) -> str:
        if analysis.type == SubjectType.CLUB:
            return "The club"
        if analysis.type == SubjectType.TEAM:
            return f"The {analysis.entities[0]}"
        return analysis.entities[0]

    def _clarify(self, context: QuestionContext, analysis: QuestionAnalysis) -> ChatbotResponse:
        return ChatbotResponse(
            answer=self.suggester.clarification(analysis),
            confidence=0.3,
            suggestions=self.suggester.suggest(context.question or "", analysis.subject),
            debug=self._debug_payload(analysis, []),
        )

    def _not_found(self, analysis: QuestionAnalysis) -> ChatbotResponse:
        name = analysis.unresolved_subject or ""
        if DISPLAYABLE_NAME_RE.match(name):
            answer = NOT_FOUND_NAMED.format(name=name)
        else:
            answer = NOT_FOUND_GENERIC
        return ChatbotResponse(answer=answer, confidence=0.2, debug=self._debug_payload(analysis, []))

    def _visualization(
        self,
        subject: str,
        analysis: QuestionAnalysis,
        values: dict[str, Any],
    ) -> Visualization | None:
        rows = []
        for metric in analysis.metrics:
            definition = self.catalog.get(metric)
            if definition is None or metric not in values:
                continue
            rows.append({"metric": metric, "name": definition.plural, "value": values[metric]})

        if not rows:
            return None
        if len(rows) == 1:
            return Visualization(type="NumberCard", data=rows, config={"title": subject})
        return Visualization(type="Table", data=rows, config={"title": subject, "columns": ["name", "value"]})

    def _debug_payload(self, analysis: QuestionAnalysis, plans: list[QueryPlan]) -> dict[str, Any] | None:
        if not self.debug:
            return None
        return scrub_debug(
            {
                "analysis": analysis.to_dict(),
                "queries": [
                    {"query": plan.query, "params": plan.params, "notes": plan.notes}
                    for plan in plans
                ],
            }
        )
