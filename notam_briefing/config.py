"""Configuration module for the NOTAM briefing pipeline."""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration."""

    # Logging level
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Software Version
    VERSION = os.getenv('VERSION', 'v0.1.0')

    # Primary source: FAA NOTAM API
    FAA_API_URL = os.getenv('FAA_API_URL', 'https://external-api.faa.gov/notamapi/v1/notams')
    FAA_CLIENT_ID = os.getenv('FAA_CLIENT_ID', '')
    FAA_CLIENT_SECRET = os.getenv('FAA_CLIENT_SECRET', '')
    FAA_PAGE_SIZE = int(os.getenv('FAA_PAGE_SIZE', '1000'))

    # Secondary source: NAV CANADA alpha API (no credentials)
    NAVCAN_API_URL = os.getenv('NAVCAN_API_URL', 'https://plan.navcanada.ca/weather/api/alpha/')

    # Optional intermediary. PROXY_TYPE is one of: none, direct, json
    PROXY_TYPE = os.getenv('PROXY_TYPE', 'none').strip().lower()
    PROXY_URL = os.getenv('PROXY_URL', '')

    REQUEST_TIMEOUT_SECONDS = float(os.getenv('REQUEST_TIMEOUT_SECONDS', '30'))

    # Summarizer backend
    SUMMARIZER_PROVIDER = os.getenv('SUMMARIZER_PROVIDER', 'groq').strip().lower()
    SUMMARIZER_API_KEY = os.getenv('SUMMARIZER_API_KEY', '')
    SUMMARIZER_MODEL = os.getenv('SUMMARIZER_MODEL', '')

    # Token budgeting
    PROMPT_OVERHEAD_TOKENS = int(os.getenv('PROMPT_OVERHEAD_TOKENS', '1500'))
    RESPONSE_TOKENS = int(os.getenv('RESPONSE_TOKENS', '800'))
    MIN_RECORDS_FLOOR = int(os.getenv('MIN_RECORDS_FLOOR', '5'))

    # Query window bounds (hours)
    MIN_WINDOW_HOURS = 1
    MAX_WINDOW_HOURS = 168

    @classmethod
    def validate(cls):
        """Validate required configuration."""
        if not cls.FAA_API_URL:
            raise ValueError("FAA_API_URL configuration is required")
        if not cls.NAVCAN_API_URL:
            raise ValueError("NAVCAN_API_URL configuration is required")
        if cls.PROXY_TYPE not in ('none', 'direct', 'json'):
            raise ValueError(f"PROXY_TYPE must be one of none, direct, json (got '{cls.PROXY_TYPE}')")
        if cls.PROXY_TYPE != 'none' and not cls.PROXY_URL:
            raise ValueError("PROXY_URL is required when PROXY_TYPE is set")
        if cls.MIN_RECORDS_FLOOR < 1:
            raise ValueError("MIN_RECORDS_FLOOR must be at least 1")
        return True
