from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from analytics.evaluation import evaluate_results, render_markdown_report
from chatbot.config import load_chatbot_settings
from chatbot.logging_config import setup_logging
from chatbot.metrics import DEFAULT_CATALOG
from chatbot.pipeline import ChatbotService
from chatbot.types import QuestionContext


app = typer.Typer(help="Club stats chatbot CLI")
console = Console()


def _build_service(debug: bool = False) -> ChatbotService:
    settings = load_chatbot_settings()
    setup_logging(settings.log_level)
    service = ChatbotService.from_settings(settings)
    service.debug = service.debug or debug
    return service


@app.command()
def ask(
    question: str,
    player: Optional[str] = typer.Option(None, "--player", "-p", help="Pre-selected player name."),
    debug: bool = typer.Option(False, "--debug", help="Show the analysis and queries."),
) -> None:
    """Answer a natural-language stats question."""
    service = _build_service(debug)

    response = service.process_question(QuestionContext(question=question, user_context=player))

    console.print("\n[bold cyan]Answer[/bold cyan]")
    console.print(response.answer)

    if response.suggestions:
        console.print("\n[bold cyan]Try asking[/bold cyan]")
        for suggestion in response.suggestions:
            console.print(f"- {suggestion}")

    if response.sources:
        console.print("\n[bold cyan]Sources[/bold cyan]")
        console.print(", ".join(response.sources))

    details = service.get_processing_details()
    for plan in details.queries:
        console.print("\n[bold cyan]Cypher[/bold cyan]")
        console.print(plan.query)
        console.print_json(data=plan.params)

    if response.debug:
        console.print("\n[bold cyan]Debug[/bold cyan]")
        console.print_json(data=response.debug)


@app.command()
def metrics() -> None:
    """List every statistic the chatbot understands."""
    table = Table(title="Metrics")
    table.add_column("Key")
    table.add_column("Name")
    table.add_column("Format")
    table.add_column("Aliases")

    for definition in DEFAULT_CATALOG:
        table.add_row(
            definition.key,
            definition.plural,
            definition.format.value,
            ", ".join(definition.aliases),
        )

    console.print(table)


@app.command()
def evaluate(
    benchmark_path: str = "data/benchmarks/questions.json",
    output_path: str = "data/benchmarks/results/latest.json",
) -> None:
    """Run the benchmark questions and save outputs."""
    service = _build_service()

    questions = json.loads(Path(benchmark_path).read_text(encoding="utf-8"))
    results: list[dict[str, object]] = []

    for item in questions:
        prompt = item["question"]
        response = service.process_question(
            QuestionContext(question=prompt, user_context=item.get("user_context"))
        )
        details = service.get_processing_details()
        results.append(
            {
                "id": item["id"],
                "question": prompt,
                "metrics": details.analysis.metrics if details.analysis else [],
                "query_count": len(details.queries),
                "answer": response.answer,
                "queries": [plan.query for plan in details.queries],
            }
        )
        console.print(f"Processed benchmark question {item['id']}")

    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(results, indent=2), encoding="utf-8")

    summary, findings = evaluate_results(questions, results)
    summary_payload = {
        "total_questions": summary.total_questions,
        "queries_issued": summary.queries_issued,
        "metric_matches": summary.metric_matches,
        "fragment_matches": summary.fragment_matches,
        "answered_ratio": summary.answered_ratio,
        "findings_count": len(findings),
    }

    summary_path = output.with_name(f"{output.stem}_summary.json")
    summary_path.write_text(json.dumps(summary_payload, indent=2), encoding="utf-8")

    report_path = output.with_name(f"{output.stem}_report.md")
    report_path.write_text(render_markdown_report(summary, findings), encoding="utf-8")

    console.print("\nBenchmark summary:")
    console.print_json(data=summary_payload)
    console.print(f"\nSaved benchmark results to: {output}")
    console.print(f"Saved benchmark summary to: {summary_path}")
    console.print(f"Saved benchmark report to: {report_path}")


if __name__ == "__main__":
    app()
