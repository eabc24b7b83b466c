import logging
import math
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

logger = logging.getLogger("api")

PERIODS = ('current', 'fourWeek', 'thirteenWeek')
FOUR_WEEK_MAX_ORDINAL = 3
THIRTEEN_WEEK_MAX_ORDINAL = 12

_NUMBER_RE = re.compile(r"^\s*[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_WEEK_RE = re.compile(r"^W-?([0-9]+)$")


@dataclass
class PeriodValue:
    value: float
    previous: float
    change: float

    def to_dict(self) -> dict:
        return {'value': self.value, 'previous': self.previous, 'change': self.change}


@dataclass
class HistoricalPoint:
    week: str
    value: float

    def to_dict(self) -> dict:
        return {'week': self.week, 'value': self.value}


@dataclass
class MetricRecord:
    current: Optional[PeriodValue] = None
    four_week: Optional[PeriodValue] = None
    thirteen_week: Optional[PeriodValue] = None
    historical_four_week: List[HistoricalPoint] = field(default_factory=list)
    historical_thirteen_week: List[HistoricalPoint] = field(default_factory=list)

    def set_period(self, period: str, triple: PeriodValue) -> None:
        if period == 'current':
            self.current = triple
        elif period == 'fourWeek':
            self.four_week = triple
        elif period == 'thirteenWeek':
            self.thirteen_week = triple
        else:
            raise KeyError(period)

    def to_dict(self) -> dict:
        def opt(p):
            return p.to_dict() if p is not None else None
        return {
            'current': opt(self.current),
            'fourWeek': opt(self.four_week),
            'thirteenWeek': opt(self.thirteen_week),
            'historicalFourWeek': [h.to_dict() for h in self.historical_four_week],
            'historicalThirteenWeek': [h.to_dict() for h in self.historical_thirteen_week],
        }


@dataclass
class MetricsReport:
    week_ending: str
    metrics: Dict[str, MetricRecord]

    def to_dict(self) -> dict:
        return {
            'weekEnding': self.week_ending,
            'metrics': {name: rec.to_dict() for name, rec in self.metrics.items()},
        }


def parse_number(cell) -> float:
    """
    Read the leading decimal number of a cell ('12.5%' -> 12.5, '1,234' -> 1.0).
    Empty, non-numeric and NaN cells read as 0.0.
    """
    if cell is None or isinstance(cell, bool):
        return 0.0
    if isinstance(cell, (int, float)):
        num = float(cell)
    else:
        m = _NUMBER_RE.match(str(cell))
        if not m:
            return 0.0
        num = float(m.group(0))
    if math.isnan(num) or math.isinf(num):
        return 0.0
    return num


def parse_week_ordinal(label) -> Optional[int]:
    """
    Parse a week label into its offset from the current week.

    Accepted formats (surrounding whitespace ignored):
      'W0'   -> 0, the current week
      'W-n'  -> n, n weeks before the current week
      'Wn'   -> n, same as 'W-n'
    Returns None for anything else.
    """
    m = _WEEK_RE.match(str(label or '').strip())
    if not m:
        return None
    return int(m.group(1))


def _week_sort_key(point: HistoricalPoint) -> int:
    ordinal = parse_week_ordinal(point.week)
    return ordinal if ordinal is not None else 0


def row_fields(headers, row) -> Dict[str, str]:
    # Duplicate header names: the last column wins.
    fields: Dict[str, str] = {}
    for idx, h in enumerate(headers):
        cell = row[idx] if idx < len(row) else ''
        fields[str(h or '').strip()] = '' if cell is None else str(cell)
    return fields


def _append_unique(points: List[HistoricalPoint], point: HistoricalPoint) -> None:
    if not any(p.week == point.week for p in points):
        points.append(point)


def today_utc() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def process_sheet_data(rows, headers, today: Optional[str] = None) -> MetricsReport:
    metrics: Dict[str, MetricRecord] = {}
    week_ending = ''

    for r in rows:
        fields = row_fields(headers, r)

        if fields.get('weekEnding') and not week_ending:
            week_ending = fields['weekEnding']

        metric_name = fields.get('metricName', '')
        # Blank names are not metrics: skip the row rather than keying a record on ""
        if not metric_name.strip():
            logger.info("Skipping row without metricName: %s", r)
            continue

        time_period = fields.get('timePeriod', '')
        value = parse_number(fields.get('value'))
        previous_value = parse_number(fields.get('previousValue'))
        change_percent = parse_number(fields.get('changePercent'))
        historical_week = fields.get('historicalWeek', '')
        historical_value = parse_number(fields.get('historicalValue'))

        record = metrics.setdefault(metric_name, MetricRecord())

        # A value of exactly 0 counts as "no data".
        if time_period and value:
            if time_period in PERIODS:
                record.set_period(time_period, PeriodValue(value, previous_value, change_percent))
            else:
                logger.info("Ignoring unknown timePeriod %r for %s", time_period, metric_name)

        if historical_week and historical_value:
            ordinal = parse_week_ordinal(historical_week)
            if ordinal is None:
                logger.info("Ignoring unparseable historicalWeek %r for %s", historical_week, metric_name)
                continue
            point = HistoricalPoint(historical_week, historical_value)
            if ordinal <= FOUR_WEEK_MAX_ORDINAL:
                _append_unique(record.historical_four_week, point)
            if ordinal <= THIRTEEN_WEEK_MAX_ORDINAL:
                _append_unique(record.historical_thirteen_week, point)

    for record in metrics.values():
        record.historical_four_week.sort(key=_week_sort_key)
        record.historical_thirteen_week.sort(key=_week_sort_key)

    return MetricsReport(week_ending=week_ending or today or today_utc(), metrics=metrics)
