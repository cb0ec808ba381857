"""ICAO location code validation."""
import re

from notam_briefing.errors import ValidationError

ICAO_PATTERN = re.compile(r'^[A-Z0-9]{4}$')


def validate_icao(code) -> str:
    """
    Validate and normalize an ICAO location code.

    Args:
        code: User-supplied code, e.g. "kjfk "

    Returns:
        Trimmed, upper-cased code, e.g. "KJFK"

    Raises:
        ValidationError: If the code is empty, not a string, or not 4 alphanumerics
    """
    if not code or not isinstance(code, str):
        raise ValidationError("ICAO code is required")

    normalized = code.strip().upper()
    if not ICAO_PATTERN.match(normalized):
        raise ValidationError(
            f"Invalid ICAO code '{code}': expected exactly 4 letters or digits"
        )
    return normalized
