from __future__ import annotations

import logging
from typing import Any

from neo4j import GraphDatabase
from neo4j.exceptions import DriverError, Neo4jError

from .types import QueryResult


logger = logging.getLogger(__name__)


class QueryExecutionError(RuntimeError):
    pass


class Neo4jQueryExecutor:
    """Read-only query sink; managed read transactions retry transient failures with backoff."""

    def __init__(
        self,
        uri: str,
        user: str,
        password: str,
        database: str = "neo4j",
        max_retry_time: float = 15.0,
    ):
        self.database = database
        self.driver = GraphDatabase.driver(
            uri,
            auth=(user, password),
            max_transaction_retry_time=max_retry_time,
        )

    def close(self) -> None:
        self.driver.close()

    def run_query(self, query: str, params: dict[str, Any]) -> QueryResult:
        def _read(tx) -> tuple[list[str], list[dict[str, Any]]]:
            result = tx.run(query, params)
            columns = list(result.keys())
            return columns, [record.data() for record in result]

        try:
            with self.driver.session(database=self.database) as session:
                columns, records = session.execute_read(_read)
        except (Neo4jError, DriverError) as exc:
            raise QueryExecutionError("Graph query failed after retries.") from exc

        logger.debug("Query returned %d record(s)", len(records))
        return QueryResult(columns=columns, records=records)
