#!/usr/bin/env python3
"""
Opportunity Scan Runner

Identifies opportunities for one brand and optionally converts the top
queries into stored recommendations.

Usage:
    # Set environment variables first:
    export DATABASE_URL=postgresql://...
    export ANTHROPIC_API_KEY=your_key   # only needed for --recommend

    python scripts/run_opportunity_scan.py <brand_id>

    # With options:
    python scripts/run_opportunity_scan.py <brand_id> \
        --customer <customer_id> \
        --days 30 \
        --collectors chatgpt,perplexity \
        --recommend
"""

import asyncio
import argparse
import json
import logging
import sys

from dotenv import load_dotenv

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)


async def run_scan(
    brand_id: str,
    customer_id: str = None,
    days: int = None,
    collectors: list = None,
    topics: list = None,
    recommend: bool = False,
    as_json: bool = False,
) -> int:
    """Run identification (and conversion) for one brand. Returns an exit code."""

    load_dotenv()

    from aeo_engine.analyzer import ClaudeClient
    from aeo_engine.database import SqlMetricsStore, init_db
    from aeo_engine.errors import BrandNotFoundError
    from aeo_engine.opportunity import OpportunityIdentifier
    from aeo_engine.recommendations import RecommendationSynthesizer
    from aeo_engine.utils.config import get_settings

    init_db()
    store = SqlMetricsStore()
    identifier = OpportunityIdentifier(store)

    try:
        response = identifier.identify_opportunities(
            brand_id,
            customer_id=customer_id,
            days=days,
            collectors=collectors,
            topics=topics,
        )
    except BrandNotFoundError as e:
        print(f"ERROR: {e}")
        return 1

    if as_json:
        print(json.dumps(response.to_dict(), indent=2, default=str))
    else:
        print(f"\n{'='*70}")
        print(f"AEO OPPORTUNITIES - {response.brand_name}")
        print(f"{'='*70}")
        print(f"Window:       {response.start.date()} to {response.end.date()}")
        print(f"Queries:      {response.total_analyzed_queries}")
        print(f"Found:        {response.summary['total']}")
        print(f"By severity:  {response.summary['by_severity']}")
        print(f"{'='*70}\n")

        for opp in response.opportunities[:20]:
            target = f" vs {opp.competitor}" if opp.competitor else ""
            print(
                f"[{opp.severity.value:<8}] {opp.priority_score:>6.2f}  "
                f"{opp.metric.value:<10} gap {opp.gap:>5.1f}{target}  {opp.query_text[:60]}"
            )

    if not recommend:
        return 0

    settings = get_settings()
    llm = ClaudeClient() if settings.ANTHROPIC_API_KEY else None

    synthesizer = RecommendationSynthesizer(identifier=identifier, llm=llm, store=store)
    result = await synthesizer.convert_to_recommendations(brand_id, customer_id)

    print(f"\n{result.status}: {result.message}")
    for rec in result.recommendations:
        print(f"  {rec.display_order:>2}. [{rec.priority}] {rec.action} ({rec.channel})")

    return 0 if result.success else 2


def _csv(value):
    return [v.strip() for v in value.split(",") if v.strip()] if value else None


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Identify AEO opportunities for a brand"
    )
    parser.add_argument(
        "brand_id",
        help="Brand ID to scan"
    )
    parser.add_argument(
        "--customer",
        default=None,
        help="Customer (tenant) ID"
    )
    parser.add_argument(
        "--days",
        type=int,
        default=None,
        help="Lookback window in days (default: DEFAULT_LOOKBACK_DAYS)"
    )
    parser.add_argument(
        "--collectors",
        default=None,
        help="Comma-separated collectors (e.g., chatgpt,perplexity)"
    )
    parser.add_argument(
        "--topics",
        default=None,
        help="Comma-separated topics"
    )
    parser.add_argument(
        "--recommend",
        action="store_true",
        help="Convert top opportunities into recommendations"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the opportunity response as JSON"
    )

    args = parser.parse_args()

    sys.exit(asyncio.run(run_scan(
        brand_id=args.brand_id,
        customer_id=args.customer,
        days=args.days,
        collectors=_csv(args.collectors),
        topics=_csv(args.topics),
        recommend=args.recommend,
        as_json=args.json,
    )))


if __name__ == "__main__":
    main()
