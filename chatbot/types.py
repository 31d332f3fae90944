from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class SubjectType(str, Enum):
    PLAYER = "player"
    TEAM = "team"
    CLUB = "club"
    UNKNOWN = "unknown"


class TimeFrameType(str, Enum):
    SEASON = "season"
    BEFORE = "before"
    SINCE = "since"
    RANGE = "range"
    BETWEEN = "between"


@dataclass(frozen=True)
class QuestionContext:
    question: str
    user_context: str | None = None


@dataclass
class TimeFrame:
    type: TimeFrameType
    value: str
    start: str | None = None
    end: str | None = None


@dataclass
class ExtractionResult:
    time_frames: list[TimeFrame] = field(default_factory=list)
    locations: list[str] = field(default_factory=list)
    team_entities: list[str] = field(default_factory=list)
    team_exclusions: list[str] = field(default_factory=list)
    oppositions: list[str] = field(default_factory=list)
    competition_types: list[str] = field(default_factory=list)
    results: list[str] = field(default_factory=list)
    positions: list[str] = field(default_factory=list)
    single_date: str | None = None


@dataclass
class QuestionAnalysis:
    type: SubjectType
    entities: list[str] = field(default_factory=list)
    metrics: list[str] = field(default_factory=list)
    time_range: str = ""
    extraction_result: ExtractionResult = field(default_factory=ExtractionResult)
    unresolved_subject: str | None = None
    ambiguities: list[str] = field(default_factory=list)

    @property
    def subject(self) -> str | None:
        return self.entities[0] if self.entities else None

    def time_frame(self, frame_type: TimeFrameType) -> TimeFrame | None:
        for frame in self.extraction_result.time_frames:
            if frame.type == frame_type:
                return frame
        return None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class QueryPlan:
    query: str
    params: dict[str, Any]
    metrics: list[str]
    columns: dict[str, str]
    notes: list[str] = field(default_factory=list)


@dataclass
class QueryResult:
    columns: list[str]
    records: list[dict[str, Any]]


@dataclass
class Visualization:
    type: str
    data: list[dict[str, Any]]
    config: dict[str, Any] = field(default_factory=dict)


@dataclass
class ChatbotResponse:
    answer: str
    confidence: float
    visualization: Visualization | None = None
    sources: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    debug: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        return {key: value for key, value in payload.items() if value is not None}


@dataclass
class ProcessingDetails:
    analysis: QuestionAnalysis | None
    queries: list[QueryPlan] = field(default_factory=list)
