"""
Pytest configuration and shared fixtures
"""
from unittest.mock import Mock

import pytest

from api._shared import SheetConfig


HEADERS = [
    'metricName', 'timePeriod', 'value', 'previousValue', 'changePercent',
    'historicalWeek', 'historicalValue', 'weekEnding',
]


@pytest.fixture
def headers():
    return list(HEADERS)


@pytest.fixture
def sheet_config():
    return SheetConfig(sheet_id='sheet-123', api_key='test-key', sheet_range='Metrics!A:H', timeout_s=5)


@pytest.fixture
def sheet_values(headers):
    """Values grid as returned by the Sheets API: header row followed by data rows"""
    return [
        headers,
        ['Signups', 'current', '150', '120', '25', 'W0', '150', '2024-01-07'],
        ['Signups', 'fourWeek', '540', '500', '8', 'W-1', '130', ''],
        ['Signups', '', '', '', '', 'W-4', '110', '2024-01-14'],
        ['Revenue', 'current', '1000.5', '900', '11.2', 'W-13', '800', ''],
    ]


def make_response(status_code=200, payload=None, reason='OK'):
    resp = Mock()
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 400
    resp.reason = reason
    resp.json.return_value = payload if payload is not None else {}
    return resp


@pytest.fixture
def response_factory():
    return make_response
