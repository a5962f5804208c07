#!/usr/bin/env python3
"""
Dashboard Refresh Runner

Scheduled entry point for the MarketPulse cache. Run it weekly (cron or a
platform scheduler); it only calls DataForSEO when the cached dashboard
has expired unless --force is given.

Usage:
    # Set environment variables first (or use a .env file):
    export DATAFORSEO_LOGIN=your_login
    export DATAFORSEO_PASSWORD=your_password
    export DATABASE_URL=postgresql://...

    # Refresh if expired, print a summary:
    python scripts/refresh_dashboard.py

    # Other modes:
    python scripts/refresh_dashboard.py --force
    python scripts/refresh_dashboard.py --all
    python scripts/refresh_dashboard.py --alerts 5
    python scripts/refresh_dashboard.py --status
    python scripts/refresh_dashboard.py --invalidate market_dashboard
"""

import asyncio
import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from marketpulse.database import get_db_context, init_db
from marketpulse.errors import MarketPulseError
from marketpulse.services import DashboardService
from marketpulse.utils.config import get_settings

logger = logging.getLogger(__name__)


def configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    # Reduce noise from HTTP libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def print_dashboard(dashboard: dict):
    overview = dashboard["overview"]
    meta = dashboard["cache_meta"]
    metrics = dashboard["metrics"]

    print(f"\nSource: {meta['source']} (cached at {meta['cached_at']}, expires {meta['expires_at']})")
    if meta.get("warning"):
        print(f"WARNING: {meta['warning']}")

    print(f"\n{overview['own_brand_name']}: rank {overview['market_rank']} of {overview['brand_count']}, "
          f"{overview['share_of_search']}% share of search")
    print(f"Market volume: {overview['total_market_volume']:,} ({overview['market_growth']:+.1f}%)")

    momentum = metrics["market_share_momentum"]
    pressure = metrics["competitive_pressure_index"]
    sentiment = metrics["player_sentiment_velocity"]
    print(f"\nMomentum:  {momentum['score']}/10 ({momentum['trend']})")
    print(f"Pressure:  {pressure['score']}/10 ({pressure['intensity']})")
    print(f"Sentiment: {sentiment['score']:+d} ({sentiment['trend']})")

    print(f"\nAlerts: {len(dashboard['alerts'])}")
    for alert in dashboard["alerts"][:5]:
        print(f"  [{alert['severity'].upper()}] {alert['title']}")


async def run(args) -> int:
    """Run the requested operation. Returns the process exit code."""
    settings = get_settings()
    init_db()

    with get_db_context() as db:
        service = DashboardService.from_session(db, settings=settings)
        try:
            if args.invalidate:
                if args.invalidate == "all":
                    count = service.store.invalidate_all()
                else:
                    count = int(service.store.invalidate(args.invalidate))
                print(f"Invalidated {count} cache entries")
                return 0

            if args.status:
                status = service.get_cache_status()
                status["provider"] = await service.provider.check_status()
                print(json.dumps(status, indent=2, default=str))
                return 0

            if args.alerts is not None:
                alerts = await service.get_alerts(limit=args.alerts)
                print(json.dumps(alerts, indent=2))
                return 0

            if args.all:
                result = await service.refresh_all()
                print(f"Refreshed: {', '.join(result['refreshed']) or 'nothing'}")
                return 0 if result["success"] else 1

            dashboard = await service.get_dashboard_metrics(force_refresh=args.force)
            print_dashboard(dashboard)
            return 0

        except MarketPulseError as e:
            logger.error(f"Dashboard refresh failed: {e}")
            return 1

        finally:
            await service.provider.close()


def main():
    """Main entry point."""
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="Refresh and inspect the MarketPulse dashboard cache"
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Fetch from DataForSEO even if the cached dashboard is still fresh"
    )
    parser.add_argument(
        "--all",
        action="store_true",
        help="Expire every cache entry, then rebuild dashboard and alerts"
    )
    parser.add_argument(
        "--alerts",
        type=int,
        default=None,
        metavar="N",
        help="Print the top N alerts as JSON"
    )
    parser.add_argument(
        "--status",
        action="store_true",
        help="Print cache status and provider account status"
    )
    parser.add_argument(
        "--invalidate",
        default=None,
        metavar="KEY",
        help="Force-expire a cache key (or 'all')"
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override LOG_LEVEL"
    )

    args = parser.parse_args()
    configure_logging(args.log_level or get_settings().LOG_LEVEL)

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
