from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ChatbotSettings:
    neo4j_uri: str
    neo4j_user: str
    neo4j_password: str
    neo4j_database: str
    max_retry_time: float
    query_max_rows: int
    subjects_csv: str | None
    debug: bool
    log_level: str


def load_chatbot_settings() -> ChatbotSettings:
    load_dotenv()

    neo4j_uri = os.getenv("NEO4J_URI")
    if not neo4j_uri:
        raise RuntimeError("NEO4J_URI is not configured.")

    return ChatbotSettings(
        neo4j_uri=neo4j_uri,
        neo4j_user=os.getenv("NEO4J_USER", "neo4j"),
        neo4j_password=os.getenv("NEO4J_PASSWORD", ""),
        neo4j_database=os.getenv("NEO4J_DATABASE", "neo4j"),
        max_retry_time=float(os.getenv("NEO4J_MAX_RETRY_TIME", "15")),
        query_max_rows=int(os.getenv("QUERY_MAX_ROWS", "100")),
        subjects_csv=os.getenv("SUBJECTS_CSV") or None,
        debug=os.getenv("CHATBOT_DEBUG", "false").strip().lower() in TRUTHY,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
