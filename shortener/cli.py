"""
Command-line interface for the URL shortener core.

Usage:
    shortener shorten <url> [--ttl-days N]
    shortener resolve <short_code>
    shortener deactivate <short_code>
    shortener analytics <short_code> [--history N]
    shortener summary
    shortener cleanup [--watch] [--interval SECONDS]
    shortener health

Backend and policy settings come from the environment (see config.py);
--backend and --redis-url override them.
"""

import argparse
import asyncio
import json
import sys
from typing import Optional

from config import Config, load_config
from .common.logging_config import setup_logging
from .errors import ShortenerError
from .factory import create_service
from .service import URLShortenerService


def _print_json(payload: dict, error: bool = False) -> None:
    print(json.dumps(payload, indent=2), file=sys.stderr if error else sys.stdout)


def _fail(message: str) -> int:
    _print_json({"success": False, "error": message}, error=True)
    return 1


class URLShortenerCLI:
    """Command-line interface for URL shortener."""

    def __init__(
        self,
        config: Config,
        verbose: bool = False,
        service: Optional[URLShortenerService] = None,
    ):
        """Initialize CLI."""
        self.config = config
        self.verbose = verbose
        self.logger = setup_logging(
            level="DEBUG" if verbose else "WARNING",
            log_file=config.log_file,
            json_format=config.log_json,
        )
        self.service = service

    async def initialize(self):
        """Initialize backends and service."""
        if self.service is None:
            self.service = await create_service(self.config, self.logger)

    async def cleanup(self):
        """Cleanup resources."""
        if self.service:
            await self.service.close()

    async def shorten(self, url: str, ttl_days: Optional[int] = None):
        """Shorten a URL."""
        try:
            mapping = await self.service.create_short_url(url, ttl_days)
        except ShortenerError as e:
            return _fail(str(e))

        _print_json({
            "success": True,
            **mapping.to_dict(),
            "short_url": self.service.short_url(mapping.short_code),
        })
        return 0

    async def resolve(self, short_code: str):
        """Resolve a short code, counting it as a click."""
        original_url = await self.service.resolve(short_code)
        await self.service.flush_analytics()

        if original_url is None:
            return _fail(f"Short code '{short_code}' not found")

        _print_json({
            "success": True,
            "short_code": short_code,
            "original_url": original_url,
        })
        return 0

    async def deactivate(self, short_code: str):
        """Deactivate a short code."""
        deactivated = await self.service.deactivate(short_code)
        _print_json({
            "success": True,
            "short_code": short_code,
            "deactivated": deactivated,
        })
        return 0

    async def analytics(self, short_code: str, history: int = 0):
        """Show click statistics for a short code."""
        result = await self.service.get_analytics(short_code)
        if result is None:
            return _fail(f"Short code '{short_code}' not found")

        payload = {"success": True, **result.to_dict()}
        if history:
            recorder = self.service.analytics
            clicks = await recorder.get_click_history(short_code, history)
            payload["recent_clicks"] = [c.to_dict() for c in clicks]
            payload["unique_visitors"] = await recorder.unique_visitors(short_code)
            payload["top_referrers"] = await recorder.top_referrers(short_code)

        _print_json(payload)
        return 0

    async def summary(self):
        """Show the aggregate analytics summary."""
        summary = await self.service.get_summary()
        _print_json({"success": True, **summary.to_dict()})
        return 0

    async def cleanup_expired(self, watch: bool = False, interval: Optional[int] = None):
        """Deactivate expired mappings once, or repeatedly with --watch."""
        if watch:
            interval = interval or self.config.cleanup_interval_seconds
            if interval <= 0:
                return _fail("Cleanup interval must be positive")
            await self.service.run_cleanup_loop(interval)
            return 0

        count = await self.service.cleanup_expired()
        _print_json({"success": True, "deactivated": count})
        return 0

    async def health(self):
        """Check service health."""
        health_status = await self.service.health_check()
        stats = await self.service.get_statistics()

        _print_json({
            "success": True,
            "health": health_status,
            "statistics": stats,
        })

        return 0 if health_status["overall"] else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shortener",
        description="URL Shortener CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Shorten a URL that expires in 7 days
  %(prog)s shorten https://example.com/long/url --ttl-days 7

  # Resolve a short code
  %(prog)s resolve Ab3xQ9

  # Click statistics with the last 10 clicks
  %(prog)s analytics Ab3xQ9 --history 10

  # Deactivate expired links every 10 minutes
  %(prog)s --backend redis cleanup --watch --interval 600
        """
    )

    parser.add_argument(
        "--backend",
        choices=["memory", "redis"],
        help="Store backend (default: from STORE_BACKEND env or memory)"
    )

    parser.add_argument(
        "--redis-url",
        help="Redis connection URL (default: from REDIS_URL env)"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    shorten_parser = subparsers.add_parser("shorten", help="Shorten a URL")
    shorten_parser.add_argument("url", help="URL to shorten")
    shorten_parser.add_argument("--ttl-days", type=int, help="Days until the link expires")

    resolve_parser = subparsers.add_parser("resolve", help="Get original URL")
    resolve_parser.add_argument("short_code", help="Short code to lookup")

    deactivate_parser = subparsers.add_parser("deactivate", help="Deactivate a short code")
    deactivate_parser.add_argument("short_code", help="Short code to deactivate")

    analytics_parser = subparsers.add_parser("analytics", help="Get click statistics")
    analytics_parser.add_argument("short_code", help="Short code to get stats for")
    analytics_parser.add_argument("--history", type=int, default=0, help="Include the N most recent clicks")

    subparsers.add_parser("summary", help="Aggregate analytics across all codes")

    cleanup_parser = subparsers.add_parser("cleanup", help="Deactivate expired short codes")
    cleanup_parser.add_argument("--watch", action="store_true", help="Keep running periodically")
    cleanup_parser.add_argument("--interval", type=int, help="Seconds between passes with --watch")

    subparsers.add_parser("health", help="Check service health")

    return parser


async def run(argv=None, service: Optional[URLShortenerService] = None) -> int:
    """Parse arguments and execute one command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    overrides = {}
    if args.backend:
        overrides["store_backend"] = args.backend
    if args.redis_url:
        overrides["redis_url"] = args.redis_url

    cli = URLShortenerCLI(
        config=load_config(**overrides),
        verbose=args.verbose,
        service=service,
    )

    try:
        await cli.initialize()

        if args.command == "shorten":
            return await cli.shorten(args.url, args.ttl_days)
        elif args.command == "resolve":
            return await cli.resolve(args.short_code)
        elif args.command == "deactivate":
            return await cli.deactivate(args.short_code)
        elif args.command == "analytics":
            return await cli.analytics(args.short_code, args.history)
        elif args.command == "summary":
            return await cli.summary()
        elif args.command == "cleanup":
            return await cli.cleanup_expired(args.watch, args.interval)
        elif args.command == "health":
            return await cli.health()
        else:
            parser.print_help()
            return 1

    except ShortenerError as e:
        return _fail(str(e))
    finally:
        await cli.cleanup()


def main(argv=None) -> int:
    """Console script entry point."""
    try:
        return asyncio.run(run(argv))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
