"""NOTAM domain model."""
from datetime import datetime
from typing import Optional, Dict, Any, Union
from dataclasses import dataclass, field
from enum import Enum

from notam_briefing.parser import ParsedNotamBody, parse_raw_notam

PERMANENT_SENTINELS = ('PERM', 'PERMANENT')
MISSING_NUMBER = 'N/A'
MISSING_TEXT = 'Full NOTAM text not available from source.'

Timestamp = Union[str, datetime, None]


class NotamSource(Enum):
    """Provenance of a NOTAM record."""
    PRIMARY = "PRIMARY"      # FAA NOTAM API
    SECONDARY = "SECONDARY"  # NAV CANADA

    @property
    def label(self) -> str:
        return "FAA" if self is NotamSource.PRIMARY else "NAV CANADA"


@dataclass
class NotamRecord:
    """Canonical NOTAM record shared by both upstream sources."""

    number: str
    text: str
    effective_start: Timestamp = None
    effective_end: Timestamp = None
    source: NotamSource = NotamSource.PRIMARY

    _parsed: Optional[ParsedNotamBody] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        """Apply sentinel values for missing identity fields."""
        if not self.number:
            self.number = MISSING_NUMBER
        if not self.text or not isinstance(self.text, str):
            self.text = MISSING_TEXT

    @property
    def parsed(self) -> Optional[ParsedNotamBody]:
        """Structured view of the raw text, computed on first access."""
        if self._parsed is None:
            self._parsed = parse_raw_notam(self.text)
        return self._parsed

    @property
    def is_cancellation(self) -> bool:
        return bool(self.parsed and self.parsed.is_cancellation)

    @property
    def cancels_notam(self) -> Optional[str]:
        return self.parsed.cancels_notam if self.parsed else None

    @property
    def is_permanent(self) -> bool:
        """True when the record has no defined end."""
        if self.effective_end is None:
            return True
        if isinstance(self.effective_end, str):
            return self.effective_end.strip().upper() in PERMANENT_SENTINELS
        return False

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-friendly dictionary."""
        result = {
            'number': self.number,
            'text': self.text,
            'effective_start': self.effective_start,
            'effective_end': self.effective_end,
            'source': self.source.value,
        }
        for key in ('effective_start', 'effective_end'):
            if isinstance(result[key], datetime):
                result[key] = result[key].isoformat()
        return result

    def summary(self) -> str:
        """Generate a human-readable block for console output."""
        header = f"{self.number} | {self.source.label}"
        lines = [header, "=" * len(header)]

        valid_str = f"Valid: {self.effective_start or 'already effective'}"
        if self.is_permanent:
            valid_str += " → PERMANENT"
        else:
            valid_str += f" → {self.effective_end}"
        lines.append(valid_str)

        if self.is_cancellation:
            lines.append(f"Cancels: {self.cancels_notam}")

        lines.append(f"\n{self.text}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        """Compact single-line representation."""
        flags = []
        if self.is_cancellation:
            flags.append("CNL")
        if self.is_permanent:
            flags.append("PERM")

        flag_str = f" [{','.join(flags)}]" if flags else ""
        return f"<NotamRecord {self.number} {self.source.value}{flag_str}>"
