from __future__ import annotations

import logging

from .entities import SubjectMatcher
from .intents import (
    clean_question,
    detect_club_scope,
    extract_competition_types,
    extract_locations,
    extract_metric_keys,
    extract_oppositions,
    extract_positions,
    extract_results,
    extract_subject_candidate,
    extract_team_filters,
    extract_time_frame,
)
from .metrics import DEFAULT_CATALOG, MetricCatalog
from .types import ExtractionResult, QuestionAnalysis, QuestionContext, SubjectType


logger = logging.getLogger(__name__)


class QuestionAnalyzer:
    def __init__(self, subject_names: list[str], catalog: MetricCatalog = DEFAULT_CATALOG):
        self.catalog = catalog
        self.subjects = SubjectMatcher(subject_names)

    def analyze(self, context: QuestionContext) -> QuestionAnalysis:
        try:
            analysis = self._analyze(context)
        except Exception:
            logger.exception("Question analysis failed")
            return QuestionAnalysis(type=SubjectType.UNKNOWN)

        logger.debug(
            "Analysed question: type=%s entities=%s metrics=%s time_range=%r",
            analysis.type.value,
            analysis.entities,
            analysis.metrics,
            analysis.time_range,
        )
        return analysis

    def _analyze(self, context: QuestionContext) -> QuestionAnalysis:
        question = clean_question(context.question)

        extraction = ExtractionResult()
        time_range = ""
        time_frame = extract_time_frame(question)
        if time_frame is not None:
            time_range = time_frame.time_range
            if time_frame.frame is not None:
                extraction.time_frames.append(time_frame.frame)
            else:
                extraction.single_date = time_frame.time_range

        extraction.locations = extract_locations(question)
        extraction.team_entities, extraction.team_exclusions = extract_team_filters(question)
        extraction.oppositions = extract_oppositions(question)
        extraction.competition_types = extract_competition_types(question)
        extraction.results = extract_results(question)
        extraction.positions = extract_positions(question)

        analysis = QuestionAnalysis(
            type=SubjectType.UNKNOWN,
            metrics=extract_metric_keys(question, self.catalog),
            time_range=time_range,
            extraction_result=extraction,
        )
        self._resolve_subject(analysis, question, clean_question(context.user_context or ""))

        if analysis.type == SubjectType.PLAYER:
            self._apply_squad_appearances(analysis)
        return analysis

    def _resolve_subject(self, analysis: QuestionAnalysis, question: str, user_context: str) -> None:
        extraction = analysis.extraction_result

        if user_context:
            name = self.subjects.lookup(user_context)
            if name:
                analysis.type = SubjectType.PLAYER
                analysis.entities = [name]
            else:
                analysis.unresolved_subject = user_context
            return

        names = self.subjects.distinct_names(question)
        if len(names) == 1:
            analysis.type = SubjectType.PLAYER
            analysis.entities = names
            return
        if len(names) > 1:
            analysis.ambiguities.append(f"Question names more than one player: {', '.join(names)}.")
            return

        if detect_club_scope(question):
            analysis.type = SubjectType.CLUB
            return

        if len(extraction.team_entities) == 1:
            analysis.type = SubjectType.TEAM
            analysis.entities = list(extraction.team_entities)
            return
        if len(extraction.team_entities) > 1:
            analysis.ambiguities.append("Question names more than one team.")
            return

        analysis.unresolved_subject = extract_subject_candidate(question, ignore=extraction.oppositions)

    def _apply_squad_appearances(self, analysis: QuestionAnalysis) -> None:
        extraction = analysis.extraction_result
        if "APP" not in analysis.metrics or len(extraction.team_entities) != 1 or extraction.team_exclusions:
            return

        squad_metric = self.catalog.squad_appearance_metric(extraction.team_entities[0])
        if squad_metric is None:
            return
        analysis.metrics = [squad_metric.key if key == "APP" else key for key in analysis.metrics]
