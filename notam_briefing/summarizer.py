"""Summarizer backends used to turn NOTAM sets into briefings."""
import requests
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional

from notam_briefing.config import Config
from notam_briefing.errors import SummarizerError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderSpec:
    """Static description of an OpenAI-compatible chat completions provider."""

    name: str
    api_url: str
    default_model: str


PROVIDERS = MappingProxyType({
    'groq': ProviderSpec(
        name='Groq',
        api_url='https://api.groq.com/openai/v1/chat/completions',
        default_model='llama-3.3-70b-versatile',
    ),
    'openai': ProviderSpec(
        name='OpenAI',
        api_url='https://api.openai.com/v1/chat/completions',
        default_model='gpt-4o-mini',
    ),
})


class Summarizer(ABC):
    """Capability that turns a prompt into briefing text."""

    model = ''

    @abstractmethod
    def summarize(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        """Return the model's completion for the given prompts."""
        pass


class ChatCompletionSummarizer(Summarizer):
    """Summarizer calling a chat completions endpoint over HTTP."""

    def __init__(self, provider: ProviderSpec, api_key: str, model: Optional[str] = None,
                 session: Optional[requests.Session] = None, timeout: Optional[float] = None):
        self.provider = provider
        self.model = model or provider.default_model
        self.session = session or requests.Session()
        self.session.headers.update({
            'Authorization': f'Bearer {api_key}',
            'Content-Type': 'application/json',
        })
        self.timeout = timeout if timeout is not None else Config.REQUEST_TIMEOUT_SECONDS

    def summarize(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        payload = {
            'model': self.model,
            'messages': [
                {'role': 'system', 'content': system_prompt},
                {'role': 'user', 'content': user_prompt},
            ],
            'temperature': 0.1,
            'max_tokens': max_tokens,
            'top_p': 0.8,
        }

        logger.info(f"Requesting briefing from {self.provider.name} ({self.model})")
        try:
            response = self.session.post(self.provider.api_url, json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise SummarizerError(f"{self.provider.name} request failed: {e}") from e

        if not response.ok:
            raise SummarizerError(f"{self.provider.name} API error ({response.status_code}): {response.text}")

        try:
            return response.json()['choices'][0]['message']['content']
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise SummarizerError(f"Invalid {self.provider.name} response structure: {e}") from e


def get_summarizer(provider: Optional[str] = None, api_key: Optional[str] = None,
                   model: Optional[str] = None) -> Summarizer:
    """
    Factory returning a summarizer for an explicitly chosen provider.

    Arguments default to the configured values.
    """
    name = (provider or Config.SUMMARIZER_PROVIDER).lower()
    if name not in PROVIDERS:
        raise ValueError(f"Unknown summarizer provider '{name}' (choose from {', '.join(PROVIDERS)})")

    key = api_key or Config.SUMMARIZER_API_KEY
    if not key:
        raise ValueError("SUMMARIZER_API_KEY configuration is required for summarization")

    return ChatCompletionSummarizer(PROVIDERS[name], key, model=model or Config.SUMMARIZER_MODEL or None)
