import json
import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import quote

import requests

from api._transform import process_sheet_data

logger = logging.getLogger("api")
logger.setLevel(logging.INFO)

SHEETS_API_BASE = 'https://sheets.googleapis.com/v4/spreadsheets'
API_KEY_HEADER = "X-Goog-Api-Key"
DEFAULT_SHEET_RANGE = 'Sheet1!A:H'
DEFAULT_TIMEOUT_S = 20.0

CACHE_OK = 's-maxage=900, stale-while-revalidate'
CACHE_NONE = 'no-store, no-cache, must-revalidate, max-age=0'


class SheetsError(RuntimeError):
    """Base for every failure surfaced as HTTP 500 by the metrics function."""


class ConfigError(SheetsError):
    pass


class UpstreamError(SheetsError):
    pass


class EmptyDataError(SheetsError):
    pass


@dataclass(frozen=True)
class SheetConfig:
    sheet_id: str
    api_key: str
    sheet_range: str = DEFAULT_SHEET_RANGE
    timeout_s: float = DEFAULT_TIMEOUT_S

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'SheetConfig':
        env = os.environ if environ is None else environ
        timeout_raw = (env.get('SHEETS_TIMEOUT_S') or '').strip()
        try:
            timeout_s = float(timeout_raw) if timeout_raw else DEFAULT_TIMEOUT_S
        except ValueError:
            raise ConfigError(f"Invalid SHEETS_TIMEOUT_S: {timeout_raw!r}")
        return cls(
            sheet_id=(env.get('SHEET_ID') or '').strip(),
            api_key=(env.get('API_KEY') or '').strip(),
            sheet_range=(env.get('SHEET_RANGE') or '').strip() or DEFAULT_SHEET_RANGE,
            timeout_s=timeout_s,
        )

    def validate(self) -> None:
        if not self.sheet_id or not self.api_key:
            raise ConfigError('Missing environment variables')


def json_response(data: dict, status: int = 200, extra_headers: dict | None = None):
    body = json.dumps(data, ensure_ascii=False)
    headers = {
        "Content-Type": "application/json; charset=utf-8",
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": "GET",
        "Cache-Control": CACHE_NONE,
    }
    if extra_headers:
        headers.update(extra_headers)
    return (body, status, headers)


def build_values_url(config: SheetConfig) -> str:
    sheet_id = quote(config.sheet_id, safe='')
    sheet_range = quote(config.sheet_range, safe='!:')
    return f"{SHEETS_API_BASE}/{sheet_id}/values/{sheet_range}"


def fetch_values(config: SheetConfig):
    """
    Fetch the configured range and split it into (headers, rows).
    One attempt only; any failure raises UpstreamError or EmptyDataError.
    """
    url = build_values_url(config)
    logger.info("[Sheets] fetch %s", url)
    try:
        resp = requests.get(url, headers={API_KEY_HEADER: config.api_key}, timeout=config.timeout_s)
    except requests.RequestException as e:
        # The exception text may echo request details; keep only its type
        raise UpstreamError(f"Google Sheets API request failed: {type(e).__name__}") from None
    logger.info("[Sheets] status %s", resp.status_code)
    if not resp.ok:
        raise UpstreamError(f"Google Sheets API error: {resp.reason}")
    try:
        payload = resp.json()
    except ValueError as e:
        raise UpstreamError(f"Google Sheets API returned invalid JSON: {e}") from e
    values = payload.get('values') if isinstance(payload, dict) else None
    if not values:
        raise EmptyDataError('No data found in sheet')
    return values[0], values[1:]


def build_metrics(config: SheetConfig, today: Optional[str] = None) -> dict:
    config.validate()
    headers, rows = fetch_values(config)
    report = process_sheet_data(rows, headers, today=today)
    logger.info("[Metrics] rows %d metrics %d weekEnding %s",
                len(rows), len(report.metrics), report.week_ending)
    return report.to_dict()
