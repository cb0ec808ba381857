"""Unit tests for briefing generation and the summarizer backend."""
import pytest
import requests
from datetime import datetime, timedelta, timezone
from notam_briefing.briefing import (
    BriefingGenerator,
    clean_model_output,
    compact_records,
    model_token_budget,
)
from notam_briefing.budgeter import SummarizationBudgeter
from notam_briefing.config import Config
from notam_briefing.errors import BudgetExceededError, SummarizerError
from notam_briefing.models.notam import NotamRecord, NotamSource
from notam_briefing.summarizer import PROVIDERS, ChatCompletionSummarizer, Summarizer, get_summarizer
from notam_briefing.time_window import TimeWindow

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


class RecordingSummarizer(Summarizer):
    """Summarizer that records prompts and returns a canned answer."""

    def __init__(self, answer='🔴 CRITICAL\n- RWY 04L CLSD until 1800Z', model='llama-3.3-70b-versatile'):
        self.answer = answer
        self.model = model
        self.calls = []

    def summarize(self, system_prompt, user_prompt, max_tokens):
        self.calls.append((system_prompt, user_prompt, max_tokens))
        return self.answer


class TestBriefingGenerator:
    """Test cases for BriefingGenerator."""

    @pytest.fixture
    def window(self):
        return TimeWindow(start=NOW, end=NOW + timedelta(hours=24))

    @pytest.fixture
    def records(self):
        return [
            NotamRecord(number='A0001/25', text='A0001/25 NOTAMN\nE) BIRD ACTIVITY'),
            NotamRecord(number='A0002/25', text='A0002/25 NOTAMN\nE) RWY 04L/22R CLSD',
                        effective_start='2025-06-01T10:00:00.000Z', effective_end='PERM'),
        ]

    def test_generates_briefing(self, window, records):
        summarizer = RecordingSummarizer()
        briefing = BriefingGenerator(summarizer).generate(records, 'KJFK', window, 'runway')

        assert briefing.text == '🔴 CRITICAL\n• RWY 04L CLSD until 1800Z'
        assert briefing.analysed_count == 2
        assert briefing.total_count == 2
        assert briefing.was_reduced is False
        assert briefing.truncated is False
        assert briefing.simplified is False

        _, prompt, _ = summarizer.calls[0]
        assert 'AVIATION BRIEFING: KJFK' in prompt
        assert 'PERIOD: Next 1 day' in prompt
        assert 'FOCUS: Runway/taxiway operations' in prompt
        # Critical NOTAM is listed first
        assert prompt.index('A0002/25') < prompt.index('A0001/25')

    def test_output_without_severity_headings_is_simplified(self, window, records):
        summarizer = RecordingSummarizer(answer='Runway 04L/22R is closed permanently.')

        briefing = BriefingGenerator(summarizer).generate(records, 'KJFK', window)

        assert briefing.simplified is True
        assert briefing.text == 'Runway 04L/22R is closed permanently.'

    def test_all_clear_skips_summarizer(self, window):
        summarizer = RecordingSummarizer()
        cancellation = NotamRecord(number='A0003/25', text='A0003/25 NOTAMC A0002/25\nE) CANCELLED')

        briefing = BriefingGenerator(summarizer).generate([cancellation], 'KJFK', window)

        assert briefing.all_clear is True
        assert 'No active NOTAMs found for KJFK' in briefing.text
        assert summarizer.calls == []

    def test_oversized_data_truncated(self, window):
        records = [NotamRecord(number=f'A{i:04d}/25', text=f'A{i:04d}/25 NOTAMN\nE) ' + 'WIP ' * 80) for i in range(60)]
        summarizer = RecordingSummarizer(model='llama3-8b-8192')
        budgeter = SummarizationBudgeter(min_records=100)

        briefing = BriefingGenerator(summarizer, budgeter).generate(records, 'KJFK', window)

        assert briefing.truncated is True
        assert briefing.analysed_count == 60
        assert '[TRUNCATED FOR SIZE LIMIT]' in summarizer.calls[0][1]

    def test_reduced_to_floor(self, window):
        records = [NotamRecord(number=f'A{i:04d}/25', text=f'A{i:04d}/25 NOTAMN\nE) ' + 'WIP ' * 2000) for i in range(20)]
        summarizer = RecordingSummarizer(model='llama3-8b-8192')

        briefing = BriefingGenerator(summarizer).generate(records, 'KJFK', window)

        assert briefing.analysed_count == 5
        assert briefing.was_reduced is True

    def test_no_room_for_notams(self, window, records, monkeypatch):
        monkeypatch.setattr('notam_briefing.briefing.model_token_budget', lambda model: 2000)

        with pytest.raises(BudgetExceededError):
            BriefingGenerator(RecordingSummarizer()).generate(records, 'KJFK', window)

    def test_prompt_over_model_budget(self, window, records, monkeypatch):
        monkeypatch.setattr(Config, 'PROMPT_OVERHEAD_TOKENS', 0)
        monkeypatch.setattr(Config, 'RESPONSE_TOKENS', 0)
        monkeypatch.setattr('notam_briefing.briefing.model_token_budget', lambda model: 100)

        with pytest.raises(BudgetExceededError):
            BriefingGenerator(RecordingSummarizer()).generate(records, 'KJFK', window)

    def test_model_budget(self):
        assert model_token_budget('llama3-8b-8192') == 5000
        assert model_token_budget('llama-3.3-70b-versatile') == 12000

    def test_compact_records(self):
        record = NotamRecord(number='A1234/25', text='E) ' + 'X' * 400, effective_end='PERM',
                             source=NotamSource.SECONDARY)
        compact = compact_records([record])[0]

        assert compact['id'] == 1
        assert len(compact['text']) == 300
        assert compact['valid_to'] == 'PERM'
        assert compact['source'] == 'NAV CANADA'

    def test_clean_model_output(self):
        raw = "Here is your briefing:\n\n🔴 CRITICAL\n1. RWY CLSD\n\n\n🟢 ADVISORY\n* BIRDS"
        assert clean_model_output(raw) == '🔴 CRITICAL\n• RWY CLSD\n🟢 ADVISORY\n• BIRDS'


class TestChatCompletionSummarizer:
    """Test cases for the HTTP summarizer."""

    def test_request_and_response(self, fake_session, make_response):
        answer = {'choices': [{'message': {'content': '🔴 CRITICAL'}}]}
        session = fake_session(make_response(200, answer))
        summarizer = ChatCompletionSummarizer(PROVIDERS['groq'], 'key-123', session=session)

        assert summarizer.summarize('system', 'user', 800) == '🔴 CRITICAL'

        method, url, kwargs = session.calls[0]
        assert method == 'POST'
        assert url == PROVIDERS['groq'].api_url
        assert kwargs['json']['model'] == 'llama-3.3-70b-versatile'
        assert kwargs['json']['max_tokens'] == 800
        assert session.headers['Authorization'] == 'Bearer key-123'

    def test_http_error(self, fake_session, make_response):
        session = fake_session(make_response(429, text='rate limited'))
        summarizer = ChatCompletionSummarizer(PROVIDERS['openai'], 'key', session=session)

        with pytest.raises(SummarizerError, match='429'):
            summarizer.summarize('s', 'u', 10)

    def test_bad_structure(self, fake_session, make_response):
        session = fake_session(make_response(200, {'choices': []}))
        summarizer = ChatCompletionSummarizer(PROVIDERS['openai'], 'key', session=session)

        with pytest.raises(SummarizerError, match='Invalid OpenAI response'):
            summarizer.summarize('s', 'u', 10)

    def test_network_error(self, fake_session):
        session = fake_session(requests.exceptions.Timeout('timed out'))
        summarizer = ChatCompletionSummarizer(PROVIDERS['groq'], 'key', session=session)

        with pytest.raises(SummarizerError, match='timed out'):
            summarizer.summarize('s', 'u', 10)

    def test_factory(self):
        summarizer = get_summarizer('openai', api_key='key', model='gpt-4o')
        assert summarizer.model == 'gpt-4o'
        assert summarizer.provider is PROVIDERS['openai']

    def test_factory_rejects_unknown_provider(self):
        with pytest.raises(ValueError):
            get_summarizer('mystery', api_key='key')
