"""Maps provider-specific NOTAM payloads onto NotamRecord."""
import json
import logging
from typing import Any, Callable, Dict, Iterable, List

from notam_briefing.models.notam import NotamRecord, NotamSource, MISSING_NUMBER, MISSING_TEXT

logger = logging.getLogger(__name__)


def normalize_primary(item: Dict[str, Any]) -> NotamRecord:
    """
    Build a record from one FAA GeoJSON item.

    Args:
        item: Element of the FAA ``items`` array, wrapping a ``properties`` object

    Returns:
        NotamRecord tagged PRIMARY
    """
    properties = item.get('properties')
    if not isinstance(properties, dict):
        properties = {}
    return NotamRecord(
        number=properties.get('notamNumber') or MISSING_NUMBER,
        text=properties.get('text') or MISSING_TEXT,
        effective_start=properties.get('effectiveStart'),
        effective_end=properties.get('effectiveEnd'),
        source=NotamSource.PRIMARY,
    )


def _extract_raw_text(record: Dict[str, Any]) -> str:
    """
    Unwrap NAV CANADA's nested NOTAM text.

    The ``text`` field is itself a JSON document whose ``raw`` member holds
    the ICAO message with escaped newlines.
    """
    outer = record.get('text')
    if not isinstance(outer, str):
        return MISSING_TEXT

    try:
        inner = json.loads(outer)
        raw = inner.get('raw')
    except (ValueError, TypeError, AttributeError) as e:
        logger.warning(f"Could not parse nested JSON for NAV CANADA NOTAM {record.get('pk', 'N/A')}: {e}")
        return outer

    if not raw or not isinstance(raw, str):
        return outer
    return raw.replace('\\n', '\n')


def normalize_secondary(record: Dict[str, Any]) -> NotamRecord:
    """
    Build a record from one NAV CANADA ``data`` entry.

    Never raises on malformed text; the outer value is used verbatim instead.
    """
    return NotamRecord(
        number=record.get('notam_id') or MISSING_NUMBER,
        text=_extract_raw_text(record),
        effective_start=record.get('startValidity'),
        effective_end=record.get('endValidity'),
        source=NotamSource.SECONDARY,
    )


def normalize_entries(entries: Iterable[Any], normalize: Callable[[Dict[str, Any]], NotamRecord]) -> List[NotamRecord]:
    """
    Normalize a batch of provider entries, skipping any that are not objects.

    Args:
        entries: Raw entries as returned by a source client
        normalize: normalize_primary or normalize_secondary

    Returns:
        Records in upstream order
    """
    records = []
    for entry in entries:
        if not isinstance(entry, dict):
            logger.warning(f"Skipping malformed NOTAM entry: {entry!r}")
            continue
        records.append(normalize(entry))
    return records
