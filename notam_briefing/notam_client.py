"""NOTAM source clients for the FAA API and NAV CANADA."""
import json
import requests
from dataclasses import dataclass
from typing import List, Dict, Optional, Any
from abc import ABC, abstractmethod
from urllib.parse import quote
from notam_briefing.config import Config
from notam_briefing.errors import UpstreamHttpError, UpstreamApiError
import logging

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class ProxyConfig:
    """
    Intermediary used to reach the upstream APIs.

    ``direct`` proxies return the target body unchanged; ``json`` proxies
    (allorigins style) wrap it as ``{"contents": "<body>"}``.
    """

    type: str = 'none'
    url: str = ''

    @classmethod
    def from_config(cls) -> 'ProxyConfig':
        return cls(type=Config.PROXY_TYPE, url=Config.PROXY_URL)

    @classmethod
    def custom(cls, base_url: str) -> 'ProxyConfig':
        """Self-hosted proxy exposing ``/proxy?url=``."""
        base = base_url if base_url.endswith('/') else f"{base_url}/"
        return cls(type='direct', url=f"{base}proxy?url=")

    def wrap(self, target_url: str) -> str:
        if self.type == 'none' or not self.url:
            return target_url
        return self.url + quote(target_url, safe='')

    def unwrap(self, payload: Any) -> Any:
        if self.type != 'json':
            return payload
        contents = payload.get('contents') if isinstance(payload, dict) else None
        if not isinstance(contents, str):
            raise ValueError("proxy response has no 'contents' field")
        return json.loads(contents)


class BaseNotamClient(ABC):
    """
    Abstract base class for NOTAM source clients.

    Subclasses describe the request and the response envelope; the base
    class owns transport, proxying and error translation.
    """

    source_name = 'UNKNOWN'

    def __init__(self, proxy: Optional[ProxyConfig] = None,
                 session: Optional[requests.Session] = None,
                 timeout: Optional[float] = None):
        self.config = Config()
        self.proxy = proxy or ProxyConfig()
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else self.config.REQUEST_TIMEOUT_SECONDS

    @abstractmethod
    def _build_request(self, icao_code: str) -> tuple[str, dict, dict]:
        """
        Build the API request parameters.

        Returns:
            Tuple of (url, headers, params)
        """
        pass

    @abstractmethod
    def _parse_response(self, response_data: Any) -> List[Dict]:
        """Extract the list of raw NOTAM entries from the response envelope."""
        pass

    def _target_url(self, url: str, params: dict) -> str:
        return requests.Request('GET', url, params=params).prepare().url

    def fetch_notams_for_airport(self, icao_code: str) -> List[Dict]:
        """
        Fetch raw NOTAM entries for one airport.

        Args:
            icao_code: Validated ICAO code

        Returns:
            List of provider-native NOTAM dictionaries

        Raises:
            UpstreamHttpError: Transport failure or non-2xx status
            UpstreamApiError: 2xx response signalling an error in its body
        """
        url, headers, params = self._build_request(icao_code)
        request_url = self.proxy.wrap(self._target_url(url, params))

        logger.info(f"Fetching NOTAMs from {self.source_name}: {request_url}")
        try:
            response = self.session.get(request_url, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Error fetching NOTAMs from {self.source_name} for {icao_code}: {e}")
            raise UpstreamHttpError(self.source_name, str(e)) from e

        if not response.ok:
            if response.status_code == 429:
                logger.error(f"Rate limited by {self.source_name} for {icao_code}")
            raise UpstreamHttpError(
                self.source_name,
                response.text or response.reason or 'request failed',
                status_code=response.status_code,
                body=response.text,
            )

        try:
            response_data = self.proxy.unwrap(response.json())
        except ValueError as e:
            raise UpstreamApiError(
                self.source_name, f"invalid JSON response: {e}",
                status_code=response.status_code, body=response.text,
            ) from e

        notams = self._parse_response(response_data)
        logger.info(f"Found {len(notams)} NOTAM(s) from {self.source_name} for {icao_code}")
        return notams


class FAANotamClient(BaseNotamClient):
    """Primary source: FAA NOTAM API (GeoJSON), authenticated by client id/secret."""

    source_name = 'FAA'

    def _build_request(self, icao_code: str) -> tuple[str, dict, dict]:
        headers = {
            'client_id': self.config.FAA_CLIENT_ID,
            'client_secret': self.config.FAA_CLIENT_SECRET,
            'Accept': 'application/json',
        }
        params = {
            'responseFormat': 'geoJson',
            'icaoLocation': icao_code,
            'pageSize': self.config.FAA_PAGE_SIZE,
            'pageNum': 1,
            'sortBy': 'effectiveStartDate',
            'sortOrder': 'Asc',
        }
        return self.config.FAA_API_URL, headers, params

    def _parse_response(self, response_data: Any) -> List[Dict]:
        """
        Parse the FAA envelope.

        Expected format: ``{"items": [{"properties": {...}}, ...]}``, or an
        ``error`` field (with optional ``status`` and ``message``) on failure.
        """
        if not isinstance(response_data, dict):
            logger.warning(f"Unexpected FAA response format: {type(response_data)}")
            return []

        if response_data.get('error'):
            raise UpstreamApiError(
                self.source_name,
                f"{response_data['error']} - {response_data.get('message') or 'No message.'}",
                status_code=response_data.get('status'),
            )
        items = response_data.get('items') or []
        if not isinstance(items, list):
            logger.warning(f"Unexpected FAA items format: {type(items)}")
            return []
        return items


class NavCanadaNotamClient(BaseNotamClient):
    """Secondary source: NAV CANADA alpha API (no authentication)."""

    source_name = 'NAV CANADA'

    def _build_request(self, icao_code: str) -> tuple[str, dict, dict]:
        headers = {'Accept': 'application/json'}
        params = {'site': icao_code, 'alpha': 'notam'}
        return self.config.NAVCAN_API_URL, headers, params

    def _parse_response(self, response_data: Any) -> List[Dict]:
        if not isinstance(response_data, dict):
            logger.warning(f"Unexpected NAV CANADA response format: {type(response_data)}")
            return []

        data = response_data.get('data') or []
        if not isinstance(data, list):
            logger.warning(f"Unexpected NAV CANADA data format: {type(data)}")
            return []
        return data
