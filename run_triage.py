"""CLI entry point for the email triage pipeline."""

import argparse
import json
import sys

from dotenv import load_dotenv

from src.config import TriageConfig
from src.fetcher.email_fetcher import DEFAULT_QUERY
from src.filtering import FilterCriteria
from src.logging_config import configure_logging
from src.orchestrator import PipelineResult, TriageOrchestrator


def print_summary(result: PipelineResult) -> None:
    print("\n--- Pipeline Summary ---")
    for step in result.steps:
        status = "SKIPPED" if step.skipped else ("OK" if step.success else "FAILED")
        print(f"  {step.name}: {status} ({step.duration_seconds}s)")
        for key, value in step.details.items():
            print(f"    {key}: {value}")
        if step.error:
            print(f"    error: {step.error}")

    if result.insights is not None:
        insights = result.insights
        print("\n--- Insights ---")
        print(f"  total: {insights.total_emails}, needs attention: {insights.needs_attention}")
        print(
            f"  priority high/medium/low: {insights.high_priority}/"
            f"{insights.medium_priority}/{insights.low_priority}"
        )
        print(f"  overall mood: {insights.sentiment.overall_mood.value}")
        for rec in insights.recommendations:
            print(f"  [{rec.type.value}] {rec.message} -> {rec.action}")

    if result.important is not None:
        print("\n--- Important Emails ---")
        for scored in result.important:
            analysis = scored.analysis
            print(
                f"  {analysis.importance.importance:>2} {scored.email_id}: "
                f"{analysis.summary.summary}"
            )

    if result.filtered is not None:
        print("\n--- Filter Matches ---")
        for email_id, decision in result.filtered.items():
            if decision.matches:
                print(
                    f"  {email_id} -> {decision.suggested_folder} "
                    f"({decision.confidence:.2f}): {decision.filter_reason}"
                )

    if result.batch is not None:
        for error in result.batch.errors:
            print(f"  failed {error.email_id}: {error.message}", file=sys.stderr)


def print_service_stats(stats: dict) -> None:
    service = stats["serviceStats"]
    print("\n--- Service Stats ---")
    print(f"  processed: {stats['totalProcessed']}, errors: {stats['errors']}")
    print(
        f"  model requests: {service['totalRequests']}, cache hits: {service['cacheHits']}, "
        f"cache size: {service['cacheSize']}, rate limit: {service['rateLimitStatus']}"
    )


def main() -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Analyze and triage recent emails")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set logging level (overrides LOG_LEVEL env var)",
    )
    parser.add_argument(
        "--max-emails",
        type=int,
        default=50,
        help="Maximum number of emails to process (default: 50)",
    )
    parser.add_argument(
        "--query",
        default=DEFAULT_QUERY,
        help=f"Gmail search query (default: {DEFAULT_QUERY!r})",
    )
    parser.add_argument(
        "--min-importance",
        type=int,
        metavar="N",
        help="Only list emails with importance >= N (1-10)",
    )
    parser.add_argument(
        "--filter",
        metavar="JSON",
        help='Smart-filter emails against JSON criteria, e.g. {"keywords": ["invoice"]}',
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full result as JSON instead of a summary",
    )
    args = parser.parse_args()
    configure_logging(level_override=args.log_level)

    try:
        config = TriageConfig.from_env()
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    criteria = None
    if args.filter is not None:
        try:
            data = json.loads(args.filter)
            if not isinstance(data, dict):
                raise ValueError("filter criteria must be a JSON object")
            criteria = FilterCriteria.from_dict(data)
        except (ValueError, TypeError) as e:
            print(f"ERROR: invalid --filter: {e}", file=sys.stderr)
            return 1

    orchestrator = TriageOrchestrator(
        config=config, max_emails=args.max_emails, query=args.query
    )
    if criteria is not None:
        result = orchestrator.run_filter(criteria)
    elif args.min_importance is not None:
        result = orchestrator.run_important(min_importance=args.min_importance)
    else:
        result = orchestrator.run()

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print_summary(result)
        if result.batch is not None and result.batch.statistics.total_emails:
            print_service_stats(orchestrator.service_stats())
        overall = "SUCCESS" if result.success else "FAILURE"
        print(f"\nResult: {overall}")

    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
