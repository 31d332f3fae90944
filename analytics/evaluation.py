from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class BenchmarkSummary:
    total_questions: int
    queries_issued: int
    metric_matches: int
    fragment_matches: int
    answered_ratio: float



def evaluate_results(
    questions: list[dict[str, Any]],
    results: list[dict[str, Any]],
) -> tuple[BenchmarkSummary, list[dict[str, Any]]]:
    by_id = {item["id"]: item for item in questions}

    queries_issued = 0
    metric_matches = 0
    fragment_matches = 0

    findings: list[dict[str, Any]] = []

    for result in results:
        q = by_id.get(result["id"], {})
        expected_metrics = q.get("expected_metrics")
        expected_fragments = [str(fragment) for fragment in q.get("expected_contains", [])]
        expect_query = bool(q.get("expect_query", True))

        query_count = int(result.get("query_count", 0))
        answer = str(result.get("answer", ""))
        actual_metrics = list(result.get("metrics", []))

        has_query = query_count > 0
        if has_query:
            queries_issued += 1

        metric_match = expected_metrics is None or list(expected_metrics) == actual_metrics
        if metric_match:
            metric_matches += 1

        missing = [fragment for fragment in expected_fragments if fragment not in answer]
        if not missing:
            fragment_matches += 1

        if has_query != expect_query or not metric_match or missing:
            findings.append(
                {
                    "id": result["id"],
                    "question": result.get("question"),
                    "expected_metrics": expected_metrics,
                    "actual_metrics": actual_metrics,
                    "expect_query": expect_query,
                    "query_count": query_count,
                    "missing_fragments": missing,
                }
            )

    total = len(results)
    answered_ratio = (queries_issued / total) if total else 0.0

    summary = BenchmarkSummary(
        total_questions=total,
        queries_issued=queries_issued,
        metric_matches=metric_matches,
        fragment_matches=fragment_matches,
        answered_ratio=answered_ratio,
    )

    return summary, findings



def render_markdown_report(
    summary: BenchmarkSummary,
    findings: list[dict[str, Any]],
) -> str:
    lines = [
        "# Benchmark Report",
        "",
        "## Summary",
        "",
        f"- Total questions: {summary.total_questions}",
        f"- Queries issued: {summary.queries_issued}",
        f"- Metric matches: {summary.metric_matches}",
        f"- Answers containing expected text: {summary.fragment_matches}",
        f"- Answered ratio: {summary.answered_ratio:.2%}",
        "",
        "## Findings",
        "",
    ]

    if not findings:
        lines.append("No failures detected in this run.")
        return "\n".join(lines)

    lines.extend(
        [
            "| ID | Expected Metrics | Actual Metrics | Expect Query | Queries | Missing Text |",
            "|---:|---|---|---|---:|---|",
        ]
    )
    for item in findings:
        lines.append(
            "| {id} | {expected} | {actual} | {expect_query} | {query_count} | {missing} |".format(
                id=item["id"],
                expected=", ".join(item["expected_metrics"] or []) or "-",
                actual=", ".join(item["actual_metrics"]) or "-",
                expect_query=item["expect_query"],
                query_count=item["query_count"],
                missing="; ".join(item["missing_fragments"]) or "-",
            )
        )

    return "\n".join(lines)
