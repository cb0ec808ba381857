"""Token-budget reduction of NOTAM sets before summarization."""
import json
import math
import re
import logging
from typing import List, Optional, Sequence, Tuple

from notam_briefing.config import Config
from notam_briefing.models.notam import NotamRecord

logger = logging.getLogger(__name__)

CHARS_PER_TOKEN = 4
TRUNCATION_MARKER = '\n\n[TRUNCATED FOR SIZE LIMIT]'

CRITICAL = 1
OPERATIONAL = 2
ADVISORY = 3

# (rank, pattern) pairs, checked in order; unmatched records are ADVISORY
DEFAULT_PRIORITY_RULES: Tuple[Tuple[int, re.Pattern], ...] = (
    (CRITICAL, re.compile(r'RWY.*CLSD|RUNWAY.*CLOSED|ILS.*U/S', re.IGNORECASE)),
    (OPERATIONAL, re.compile(r'TWY.*CLSD|TAXIWAY.*CLOSED|NAV.*U/S|APPROACH.*RESTRICTED', re.IGNORECASE)),
)


def estimate_tokens(text: str) -> int:
    """Rough token count: characters / 4, rounded up."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def truncate_to_token_limit(text: str, max_tokens: int) -> str:
    """
    Cut text to roughly ``max_tokens`` tokens.

    Prefers a sentence end, then a newline, then a space, provided the
    breakpoint lies past 80% of the limit; otherwise cuts hard.
    """
    max_chars = max_tokens * CHARS_PER_TOKEN
    if len(text) <= max_chars:
        return text

    truncated = text[:max_chars]
    threshold = max_chars * 0.8
    last_period = truncated.rfind('.')
    last_newline = truncated.rfind('\n')
    last_space = truncated.rfind(' ')

    if last_period > threshold:
        break_point = last_period + 1
    elif last_newline > threshold:
        break_point = last_newline
    elif last_space > threshold:
        break_point = last_space
    else:
        break_point = max_chars

    return truncated[:break_point] + TRUNCATION_MARKER


class SummarizationBudgeter:
    """
    Shrinks a NOTAM set to fit a token budget, dropping the least
    operationally significant records first.
    """

    def __init__(self, priority_rules: Optional[Sequence[Tuple[int, re.Pattern]]] = None,
                 min_records: Optional[int] = None, reduction_ratio: float = 0.8):
        self.priority_rules = tuple(priority_rules) if priority_rules is not None else DEFAULT_PRIORITY_RULES
        self.min_records = min_records if min_records is not None else Config.MIN_RECORDS_FLOOR
        self.reduction_ratio = reduction_ratio

    def priority(self, record: NotamRecord) -> int:
        """Rank a record: 1 critical, 2 operational, 3 advisory."""
        for rank, pattern in self.priority_rules:
            if pattern.search(record.text):
                return rank
        return ADVISORY

    def prioritize(self, records: Sequence[NotamRecord]) -> List[NotamRecord]:
        """Stable sort by rank; ties keep their input order."""
        return sorted(records, key=self.priority)

    @staticmethod
    def estimate_cost(records: Sequence[NotamRecord]) -> int:
        return estimate_tokens(json.dumps([record.to_dict() for record in records]))

    def reduce_to_fit(self, records: Sequence[NotamRecord], target_token_budget: int) -> List[NotamRecord]:
        """
        Drop cancellations, prioritize, and trim the low-priority tail until
        the set fits ``target_token_budget`` or the record floor is reached.

        The result may still exceed the budget; callers fall back to
        ``truncate_to_token_limit``.
        """
        logger.info(f"Smart reduction: {len(records)} NOTAM(s), target: {target_token_budget} tokens")

        active = [record for record in records if not record.is_cancellation]
        dropped = len(records) - len(active)
        if dropped:
            logger.info(f"Removed {dropped} cancellation NOTAM(s)")

        result = self.prioritize(active)
        current_tokens = self.estimate_cost(result)

        while current_tokens > target_token_budget and len(result) > self.min_records:
            keep = max(math.floor(len(result) * self.reduction_ratio), self.min_records)
            result = result[:keep]
            current_tokens = self.estimate_cost(result)
            logger.info(f"Reduced to {len(result)} NOTAM(s), ~{current_tokens} tokens")

        if current_tokens > target_token_budget:
            logger.warning(
                f"Budget of {target_token_budget} tokens not met at {len(result)} NOTAM(s) "
                f"(~{current_tokens} tokens)"
            )
        return result
