"""Main application module."""
import argparse
import logging
import sys
from typing import List, Optional
from notam_briefing.briefing import Briefing, BriefingGenerator
from notam_briefing.config import Config
from notam_briefing.errors import NotamError
from notam_briefing.fetcher import NotamFetcher, get_notam_fetcher
from notam_briefing.models.notam import NotamRecord
from notam_briefing.notam_client import ProxyConfig
from notam_briefing.summarizer import PROVIDERS, Summarizer, get_summarizer
from notam_briefing.time_window import compute_window
from notam_briefing.validator import validate_icao

logger = logging.getLogger(__name__)


def configure_logging():
    """Configure root logging from the environment."""
    log_level = Config.LOG_LEVEL
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s.%(msecs)03d | %(levelname)-8s | %(name)-20s | %(filename)-15s | %(funcName)-15s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )


class BriefingApp:
    """Fetches NOTAMs for one airport and optionally summarizes them."""

    def __init__(self, fetcher: Optional[NotamFetcher] = None, summarizer: Optional[Summarizer] = None):
        """Initialize the application."""
        self.config = Config()
        self.config.validate()

        self.fetcher = fetcher or get_notam_fetcher()
        self.summarizer = summarizer

        logger.info("=" * 80)
        logger.info("NOTAM Briefing initialized")
        logger.info(f"Software Version: {self.config.VERSION}")
        logger.info(f"Primary source: {self.config.FAA_API_URL}")
        logger.info(f"Secondary source: {self.config.NAVCAN_API_URL}")
        logger.info(f"Proxy: {self.config.PROXY_TYPE}")
        logger.info("=" * 80)

    def run(self, icao_code: str, time_value: int = 24, time_unit: str = 'hours',
            enable_filtering: bool = True, summarize: bool = False,
            analysis_type: str = 'general') -> tuple[List[NotamRecord], Optional[Briefing]]:
        """
        Run a single query.

        Returns:
            Tuple of (records, briefing); briefing is None unless requested
        """
        if summarize and self.summarizer is None:
            raise ValueError("No summarizer configured")

        icao = validate_icao(icao_code)
        window = compute_window(time_value, time_unit) if enable_filtering or summarize else None
        records = self.fetcher.fetch_notams(icao, time_value, time_unit, enable_filtering, window=window)

        if not summarize:
            return records, None

        generator = BriefingGenerator(self.summarizer)
        briefing = generator.generate(records, icao, window, analysis_type)
        return records, briefing


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Fetch NOTAMs for an airport and build an operational briefing')
    parser.add_argument('icao', help='ICAO airport code, e.g. KJFK')
    window = parser.add_mutually_exclusive_group()
    window.add_argument('--hours', type=int, metavar='N', help='Time window in hours (default 24)')
    window.add_argument('--days', type=int, metavar='N', help='Time window in days')
    parser.add_argument('--no-filter', action='store_true',
                        help='Return all NOTAMs instead of only those active in the window')
    parser.add_argument('--summarize', action='store_true',
                        help='Generate an AI briefing from the retrieved NOTAMs')
    parser.add_argument('--analysis-type', choices=['general', 'runway', 'airspace'], default='general',
                        help='Briefing focus')
    parser.add_argument('--provider', choices=sorted(PROVIDERS), default=None,
                        help='Summarizer provider (default from SUMMARIZER_PROVIDER)')
    parser.add_argument('--model', default=None, help='Summarizer model override')
    parser.add_argument('--proxy-url', default=None,
                        help='Self-hosted proxy base URL exposing /proxy?url=')
    return parser


def print_results(records: List[NotamRecord], briefing: Optional[Briefing]):
    """Print records and briefing to stdout."""
    if not records:
        print("No NOTAMs found for the specified airport and time period.")
    for record in records:
        print(record.summary())
        print()

    if briefing is None:
        return
    print("=" * 80)
    if briefing.simplified:
        print(f"Analysis simplified: showing {briefing.analysed_count} of {briefing.total_count} NOTAMs")
    elif briefing.was_reduced and not briefing.all_clear:
        print(f"Showing {briefing.analysed_count} most critical of {briefing.total_count} NOTAMs")
    print(briefing.text)


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    configure_logging()
    args = build_arg_parser().parse_args(argv)

    if args.days is not None:
        time_value, time_unit = args.days, 'days'
    else:
        time_value, time_unit = (args.hours if args.hours is not None else 24), 'hours'

    try:
        fetcher = get_notam_fetcher(ProxyConfig.custom(args.proxy_url)) if args.proxy_url else None
        summarizer = get_summarizer(args.provider, model=args.model) if args.summarize else None
        app = BriefingApp(fetcher=fetcher, summarizer=summarizer)

        records, briefing = app.run(
            args.icao, time_value, time_unit,
            enable_filtering=not args.no_filter,
            summarize=args.summarize,
            analysis_type=args.analysis_type,
        )
    except NotamError as e:
        logger.error(f"Briefing failed: {e}")
        sys.exit(1)
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    print_results(records, briefing)


if __name__ == '__main__':
    main()
