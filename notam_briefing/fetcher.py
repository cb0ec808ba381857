"""Two-source NOTAM retrieval with fallback."""
import logging
from typing import List, Optional

from notam_briefing.errors import AggregateFetchError, UpstreamError
from notam_briefing.models.notam import NotamRecord
from notam_briefing.normalizer import normalize_entries, normalize_primary, normalize_secondary
from notam_briefing.notam_client import (
    BaseNotamClient,
    FAANotamClient,
    NavCanadaNotamClient,
    ProxyConfig,
)
from notam_briefing.time_window import TimeWindow, compute_window, filter_active
from notam_briefing.validator import validate_icao

logger = logging.getLogger(__name__)


class NotamFetcher:
    """
    Retrieves NOTAMs for an airport from the primary source, falling back
    to the secondary source when the primary yields nothing.

    This is a fallback, not a retry policy: each source is queried at most
    once per call.
    """

    def __init__(self, primary: BaseNotamClient, secondary: BaseNotamClient):
        self.primary = primary
        self.secondary = secondary

    def fetch_notams(self, icao_code: str, time_value: int = 24,
                     time_unit: str = 'hours', enable_filtering: bool = True,
                     window: Optional[TimeWindow] = None) -> List[NotamRecord]:
        """
        Fetch, normalize and optionally time-filter NOTAMs.

        Args:
            icao_code: Airport ICAO code (trimmed and upper-cased here)
            time_value: Window length
            time_unit: "hours" or "days"
            enable_filtering: Only return records active within the window
            window: Precomputed window to reuse instead of computing one here

        Returns:
            Records in upstream order

        Raises:
            ValidationError: Malformed ICAO code or window
            AggregateFetchError: Nothing retrieved and the primary source failed
        """
        icao = validate_icao(icao_code)
        if enable_filtering and window is None:
            window = compute_window(time_value, time_unit)
        elif not enable_filtering:
            window = None

        primary_error: Optional[UpstreamError] = None
        secondary_error: Optional[UpstreamError] = None
        records: List[NotamRecord] = []

        try:
            records = normalize_entries(self.primary.fetch_notams_for_airport(icao), normalize_primary)
        except UpstreamError as e:
            logger.warning(f"Primary source failed for {icao}: {e}")
            primary_error = e

        if not records:
            logger.info(f"{self.primary.source_name} returned no NOTAMs for {icao}. "
                        f"Falling back to {self.secondary.source_name}.")
            try:
                raw_secondary = self.secondary.fetch_notams_for_airport(icao)
            except UpstreamError as e:
                logger.warning(f"Secondary source failed for {icao}: {e}")
                secondary_error = e
                raw_secondary = []

            if raw_secondary:
                records = normalize_entries(raw_secondary, normalize_secondary)

        if not records and primary_error is not None:
            raise AggregateFetchError(icao, primary_error, secondary_error)

        if window is None:
            logger.info(f"Returning {len(records)} NOTAM(s) for {icao} (no time filtering)")
            return records

        active = filter_active(records, window)
        logger.info(f"{len(active)} of {len(records)} NOTAM(s) for {icao} active in the next {window.describe()}")
        return active


def get_notam_fetcher(proxy: Optional[ProxyConfig] = None) -> NotamFetcher:
    """
    Factory wiring the FAA and NAV CANADA clients.

    Args:
        proxy: Intermediary to use; defaults to the configured one
    """
    proxy = proxy or ProxyConfig.from_config()
    return NotamFetcher(
        primary=FAANotamClient(proxy=proxy),
        secondary=NavCanadaNotamClient(proxy=proxy),
    )
