"""Parser for raw ICAO-formatted NOTAM text."""
import re
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Any
import logging

logger = logging.getLogger(__name__)

NOTAM_NUMBER_PATTERN = re.compile(r'([A-Z]\d{4}/\d{2})')
CANCELLATION_PATTERN = re.compile(r'NOTAMC\s+([A-Z]\d{4}/\d{2})')
FIELD_PATTERN = re.compile(r'^([A-GQ])\)\s*(.*)$')

# Splits "A) EKCH B) 2512072100 C) 2512080500" into one segment per marker
INLINE_MARKER_SPLIT = re.compile(r'\s+(?=[A-GQ]\)\s)')

# Field letter -> attribute on ParsedNotamBody
FIELD_ATTRIBUTES = {
    'Q': 'q_line',
    'A': 'aerodrome',
    'B': 'valid_from_raw',
    'C': 'valid_to_raw',
    'D': 'schedule',
}

BODY_FIELDS = ('E', 'F', 'G')


@dataclass
class ParsedNotamBody:
    """Structured fields extracted from a raw NOTAM message."""

    notam_number: str = ''
    q_line: str = ''
    aerodrome: str = ''
    valid_from_raw: str = ''
    valid_to_raw: str = ''
    schedule: str = ''
    body: str = ''
    is_cancellation: bool = False
    cancels_notam: Optional[str] = None

    @property
    def is_permanent(self) -> bool:
        return self.valid_to_raw == 'PERM'

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _clean_lines(raw_text: str) -> List[str]:
    """Normalize line endings and return trimmed, non-blank lines."""
    text = (
        raw_text.replace('\\n', '\n')
        .replace('\r\n', '\n')
        .replace('\r', '\n')
        .strip()
    )
    return [line.strip() for line in text.split('\n') if line.strip()]


def _split_markers(line: str) -> List[str]:
    """
    Split a marker line holding several fields into one segment per field.

    Nothing after an E) marker is split since free text may legitimately
    contain "X)".
    """
    if line.startswith('E)'):
        return [line]
    segments = INLINE_MARKER_SPLIT.split(line)
    for index, segment in enumerate(segments):
        if segment.startswith('E)'):
            return segments[:index] + [' '.join(segments[index:])]
    return segments


def _append(current: str, addition: str) -> str:
    return f"{current}\n{addition}" if current else addition


def parse_raw_notam(raw_text) -> Optional[ParsedNotamBody]:
    """
    Parse a raw ICAO NOTAM into structured fields.

    Args:
        raw_text: Full NOTAM text, e.g. "A1234/24 NOTAMN\\nQ) ...\\nE) RWY 04L CLSD"

    Returns:
        ParsedNotamBody, or None if raw_text is not a string
    """
    if not raw_text or not isinstance(raw_text, str):
        return None

    lines = _clean_lines(raw_text)
    result = ParsedNotamBody()
    if not lines:
        return result

    first_line = lines[0]
    number_match = NOTAM_NUMBER_PATTERN.search(first_line)
    if number_match:
        result.notam_number = number_match.group(1)

    cancel_match = CANCELLATION_PATTERN.search(first_line)
    if cancel_match:
        result.is_cancellation = True
        result.cancels_notam = cancel_match.group(1)

    # The header line carries the series/number and type, not field content
    if number_match or cancel_match:
        lines = lines[1:]

    has_e_line = any(line.startswith('E)') for line in lines)
    current_field = None
    in_body = False

    for line in lines:
        if not FIELD_PATTERN.match(line):
            if in_body:
                result.body = _append(result.body, line)
            elif current_field == 'C' and not has_e_line:
                # Malformed NOTAM without E): text after C) is the body
                logger.debug(f"No E) field in NOTAM {result.notam_number or '?'}, using trailing text as body")
                result.body = _append(result.body, line)
                in_body = True
            elif current_field in FIELD_ATTRIBUTES:
                attr = FIELD_ATTRIBUTES[current_field]
                setattr(result, attr, _append(getattr(result, attr), line))
            continue

        for segment in _split_markers(line):
            match = FIELD_PATTERN.match(segment)
            if not match:
                continue
            field, value = match.group(1), match.group(2).strip()
            current_field = field

            if field == 'E':
                result.body = _append(result.body, value)
                in_body = True
            elif field in BODY_FIELDS:
                result.body = _append(result.body, f"{field}) {value}")
                in_body = True
            else:
                setattr(result, FIELD_ATTRIBUTES[field], value)
                in_body = False

    result.q_line = result.q_line.strip()
    result.aerodrome = result.aerodrome.strip()
    result.valid_from_raw = result.valid_from_raw.strip()
    result.valid_to_raw = result.valid_to_raw.strip()
    if 'PERM' in result.valid_to_raw.upper():
        result.valid_to_raw = 'PERM'
    result.schedule = result.schedule.strip()
    result.body = result.body.strip()

    return result
