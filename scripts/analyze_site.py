#!/usr/bin/env python
"""Run the AI crawler exposure analysis against a live site.

Fetches robots.txt, the sitemaps and the homepage, then prints the report
the /v1/analyzer/analyze endpoint would return. Settings are loaded the
same way as the API, so DATABASE_URL must be set (nothing is written).

Usage:
    python scripts/analyze_site.py example.com
    python scripts/analyze_site.py https://example.com --json
"""

import argparse
import json
import sys

# Add project root to path
sys.path.insert(0, ".")


def print_summary(report: dict) -> None:
    robots = report["robots_txt"]
    sitemap = report["sitemap"]
    tech = report["tech_stack"]
    estimates = report["estimates"]

    print(f"\n{'=' * 60}")
    print(f"AI Crawler Exposure: {report['domain']}")
    print(f"{'=' * 60}\n")

    print(f"Risk:        {report['risk_score'].upper()}")
    print(f"robots.txt:  {'found' if robots['exists'] else 'missing'}")
    if robots["blocked_bots"]:
        print(f"  Blocked:   {', '.join(robots['blocked_bots'])}")
    approx = " (estimated)" if sitemap["estimated"] else ""
    print(f"Pages:       {sitemap['page_count']}{approx}")
    print(f"Platform:    {tech['platform']}")
    print(f"Protection:  {'yes' if tech['has_protection'] else 'no'}")
    if tech["indicators"]:
        print(f"  Signals:   {', '.join(tech['indicators'])}")

    print("\nEstimates:")
    print(f"  Monthly bot requests:  {estimates['monthly_bot_requests']:,}")
    print(f"  Bot traffic share:     {estimates['bot_traffic_percentage']}%")
    print(f"  Monthly cost (USD):    ${estimates['estimated_monthly_cost']}")

    print("\nAI crawlers:")
    for crawler in report["ai_crawlers"]:
        status = "allowed" if crawler["allowed"] else "blocked"
        print(f"  {crawler['name']:<20} {crawler['company']:<15} {status}")


def main() -> int:
    from worker.tasks.exposure import run_exposure_analysis_sync

    parser = argparse.ArgumentParser(description="AI crawler exposure analysis")
    parser.add_argument("url", help="Site URL or bare domain")
    parser.add_argument("--json", action="store_true", help="Print the raw report as JSON")
    args = parser.parse_args()

    try:
        report = run_exposure_analysis_sync(args.url)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(report, indent=2))
    else:
        print_summary(report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
