"""Shared fixtures: fake HTTP sessions and canned upstream payloads."""
import json
import pytest
import requests


class FakeSession:
    """Stands in for requests.Session, replaying queued responses."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []
        self.headers = {}

    def _next(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def get(self, url, **kwargs):
        return self._next('GET', url, **kwargs)

    def post(self, url, **kwargs):
        return self._next('POST', url, **kwargs)


def build_response(status_code=200, payload=None, text=None):
    response = requests.Response()
    response.status_code = status_code
    response.reason = 'OK' if status_code < 400 else 'Error'
    body = text if text is not None else json.dumps(payload)
    response._content = body.encode('utf-8')
    response.encoding = 'utf-8'
    return response


@pytest.fixture
def make_response():
    """Factory for requests.Response objects."""
    return build_response


@pytest.fixture
def fake_session():
    """Factory for FakeSession instances."""
    return FakeSession


@pytest.fixture
def faa_items():
    """Three FAA GeoJSON items for KJFK."""
    return [
        {
            'type': 'Feature',
            'properties': {
                'notamNumber': 'A0101/25',
                'text': 'A0101/25 NOTAMN\nQ) KZNY/QMRLC/IV/NBO/A/000/999/4038N07346W005\nA) KJFK B) 2501010000 C) PERM\nE) RWY 04L/22R CLSD',
                'effectiveStart': '2025-01-01T00:00:00.000Z',
                'effectiveEnd': 'PERM',
            },
        },
        {
            'type': 'Feature',
            'properties': {
                'notamNumber': 'A0102/25',
                'text': 'A0102/25 NOTAMN\nE) TWY B CLSD',
                'effectiveStart': '2025-01-02T00:00:00.000Z',
                'effectiveEnd': '2025-01-03T00:00:00.000Z',
            },
        },
        {
            'type': 'Feature',
            'properties': {
                'notamNumber': 'A0103/25',
                'text': 'A0103/25 NOTAMN\nE) BIRD ACTIVITY IN VICINITY OF AD',
                'effectiveStart': None,
                'effectiveEnd': None,
            },
        },
    ]


@pytest.fixture
def navcan_data():
    """Two NAV CANADA alpha entries for CYYZ."""
    return [
        {
            'pk': 1001,
            'notam_id': 'A1234/25',
            'startValidity': '2025-03-01T12:00:00',
            'endValidity': '2025-03-05T12:00:00',
            'text': json.dumps({'raw': 'A1234/25 NOTAMN\\nQ) CZYZ/QMXLC/IV/M/A/000/999/4341N07937W005\\nA) CYYZ B) 2503011200 C) 2503051200\\nE) TWY H CLSD'}),
        },
        {
            'pk': 1002,
            'notam_id': 'A1235/25',
            'startValidity': '2025-03-01T12:00:00',
            'endValidity': 'PERM',
            'text': json.dumps({'raw': 'A1235/25 NOTAMN\\nA) CYYZ B) 2503011200 C) PERM\\nE) OBST CRANE 300FT AGL'}),
        },
    ]
