"""Operational briefing generation from a NOTAM set."""
import json
import re
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from notam_briefing.budgeter import SummarizationBudgeter, estimate_tokens, truncate_to_token_limit
from notam_briefing.config import Config
from notam_briefing.errors import BudgetExceededError
from notam_briefing.models.notam import NotamRecord
from notam_briefing.summarizer import Summarizer
from notam_briefing.time_window import TimeWindow

logger = logging.getLogger(__name__)

SMALL_MODEL_BUDGET = 5000
DEFAULT_MODEL_BUDGET = 12000
MAX_TEXT_CHARS = 300

SEVERITY_MARKERS = ('🔴', '🟡', '🟢')

SYSTEM_PROMPT = "Expert aviation analyst. Follow exact format. Be concise. Focus on operational impact."

ANALYSIS_FOCUS = {
    'runway': 'FOCUS: Runway/taxiway operations, construction',
    'airspace': 'FOCUS: Navigation aids, airspace restrictions',
    'general': 'FOCUS: All operational impacts by severity',
}

PROMPT_TEMPLATE = """AVIATION BRIEFING: {icao}
PERIOD: Next {period}
DATA: {count} NOTAMs

MISSION: Create bullet-point operational briefing

FORMAT:
🔴 CRITICAL (max 3 items)
• [Impact + time]

🟡 OPERATIONAL (max 3 items)
• [Impact + time]

🟢 ADVISORY (max 2 items)
• [Impact + time]

RULES:
- Start with operational impact, not NOTAM text
- Include effective times for critical items
- Max 12 words per bullet
- Skip minor administrative items
- Use aviation terminology
{focus}

NOTAM DATA:
{data}

BRIEFING:"""


@dataclass
class Briefing:
    """Result of a summarization run."""

    icao_code: str
    text: str
    analysed_count: int
    total_count: int
    truncated: bool = False
    simplified: bool = False

    @property
    def was_reduced(self) -> bool:
        return self.analysed_count < self.total_count

    @property
    def all_clear(self) -> bool:
        return self.analysed_count == 0


def model_token_budget(model: str) -> int:
    """Conservative total prompt budget for a model name."""
    return SMALL_MODEL_BUDGET if '8b' in model.lower() else DEFAULT_MODEL_BUDGET


def compact_records(records: Sequence[NotamRecord]) -> List[dict]:
    """Minimal per-record payload sent to the summarizer."""
    compact = []
    for index, record in enumerate(records, 1):
        data = record.to_dict()
        compact.append({
            'id': index,
            'number': record.number,
            'text': record.text[:MAX_TEXT_CHARS],
            'valid_from': data['effective_start'],
            'valid_to': data['effective_end'],
            'source': record.source.label,
        })
    return compact


def clean_model_output(raw: str) -> str:
    """Strip preamble before the first severity heading and unify bullets."""
    positions = [raw.find(marker) for marker in SEVERITY_MARKERS if marker in raw]
    if positions:
        raw = raw[min(positions):]

    raw = re.sub(r'^[-*]\s', '• ', raw, flags=re.MULTILINE)
    raw = re.sub(r'^\d+\.\s', '• ', raw, flags=re.MULTILINE)
    raw = re.sub(r'\n\n+', '\n', raw)
    return raw.strip()


class BriefingGenerator:
    """Builds a budgeted prompt and asks the summarizer for a briefing."""

    def __init__(self, summarizer: Summarizer, budgeter: Optional[SummarizationBudgeter] = None):
        self.summarizer = summarizer
        self.budgeter = budgeter or SummarizationBudgeter()
        self.config = Config()

    def generate(self, records: Sequence[NotamRecord], icao_code: str, window: TimeWindow,
                 analysis_type: str = 'general') -> Briefing:
        """
        Generate a briefing for the given records.

        Raises:
            BudgetExceededError: If the final prompt exceeds the model budget
            SummarizerError: If the backend fails
        """
        period = window.describe()
        model_budget = model_token_budget(self.summarizer.model)
        available = model_budget - self.config.PROMPT_OVERHEAD_TOKENS - self.config.RESPONSE_TOKENS
        logger.info(f"Token budget: {model_budget} total, {available} for NOTAMs")
        if available <= 0:
            raise BudgetExceededError(model_budget - available, model_budget)

        selected = self.budgeter.reduce_to_fit(records, available)
        if not selected:
            logger.info(f"No active NOTAMs for {icao_code}, skipping summarization")
            return Briefing(
                icao_code=icao_code,
                text=f"No active NOTAMs found for {icao_code} in the next {period}. All clear for operations.",
                analysed_count=0,
                total_count=len(records),
            )

        compact = compact_records(selected)
        data = json.dumps(compact, indent=1)
        truncated = False
        if estimate_tokens(data) > available:
            logger.warning("NOTAM data still too large, applying text truncation")
            data = truncate_to_token_limit(data, available)
            truncated = True

        prompt = PROMPT_TEMPLATE.format(
            icao=icao_code,
            period=period,
            count=len(compact),
            focus=ANALYSIS_FOCUS.get(analysis_type, ANALYSIS_FOCUS['general']),
            data=data,
        )
        prompt_tokens = estimate_tokens(prompt)
        logger.info(f"Final prompt: {prompt_tokens} tokens (limit: {model_budget})")
        if prompt_tokens > model_budget:
            raise BudgetExceededError(prompt_tokens, model_budget)

        raw = self.summarizer.summarize(SYSTEM_PROMPT, prompt, self.config.RESPONSE_TOKENS)
        text = clean_model_output(raw)
        simplified = not any(marker in text for marker in SEVERITY_MARKERS)
        if simplified:
            logger.warning("Model output has no severity headings, returning simplified analysis")
        logger.info(f"Briefing generated: {len(compact)}/{len(records)} NOTAMs analysed")

        return Briefing(
            icao_code=icao_code,
            text=text,
            analysed_count=len(compact),
            total_count=len(records),
            truncated=truncated,
            simplified=simplified,
        )
