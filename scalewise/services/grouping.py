"""
Record grouping and reduction service.

This module groups flat record lists by a composite key and reduces each group
to running sums plus an ordered list of per-period sub-totals. The sub-totals
feed the consistency and trend calculations in services/metrics.py.

Key Functions:
- group_by: Bucket records by key, preserving first-seen key order
- reduce_group: Sum revenue/spend and build ordered day periods for one group
- aggregate: group_by followed by reduce_group for every group
- normalize_offer_name / network_offer_key: Offer key with alias rewrites applied
- media_buyer_key / day_key / month_key: Other standard grouping keys

Period Rules:
- One period per calendar day, ordered ascending
- Records whose day cannot be determined share one trailing "undated" period
- days_active is the number of periods, so an undated-only group still counts
  as active for one period

Conservation:
Every input record lands in exactly one group and one period; no record is
dropped from the totals.

Usage:
    from scalewise.services.grouping import aggregate, network_offer_key

    groups = aggregate(records, key_fn=network_offer_key)
    for group in groups.values():
        print(group.key, group.total_margin, group.days_active)
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date
from functools import partial
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, TypeVar

from scalewise.services.parsing import parse_amount, parse_date

logger = logging.getLogger(__name__)

T = TypeVar('T')

UNKNOWN_LABEL = 'Unknown'
UNDATED_PERIOD = 'undated'


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class PeriodTotals:
    """
    Sub-totals for one period of a group.

    Attributes:
        period: Calendar day, or None for the trailing undated bucket.
        revenue: Summed revenue.
        spend: Summed spend.
        record_count: Number of records in the period.
    """
    period: Optional[date]
    revenue: float = 0.0
    spend: float = 0.0
    record_count: int = 0

    @property
    def margin(self) -> float:
        return self.revenue - self.spend


@dataclass
class AggregateGroup:
    """
    Running sums for one grouping key.

    Built fresh on every computation pass and discarded once metrics are
    derived from it.

    Attributes:
        key: Composite grouping key.
        total_revenue: Sum of parsed revenue.
        total_spend: Sum of parsed spend.
        periods: Per-day sub-totals, ascending, undated bucket last.
        records: The grouped records in input order.
    """
    key: str
    total_revenue: float = 0.0
    total_spend: float = 0.0
    periods: List[PeriodTotals] = field(default_factory=list)
    records: List[Any] = field(default_factory=list)

    @property
    def total_margin(self) -> float:
        return self.total_revenue - self.total_spend

    @property
    def days_active(self) -> int:
        return len(self.periods)

    @property
    def period_margins(self) -> List[float]:
        return [period.margin for period in self.periods]

    @property
    def period_spends(self) -> List[float]:
        return [period.spend for period in self.periods]


@dataclass(frozen=True)
class GroupExtractors:
    """
    Field accessors used by reduce_group.

    revenue and spend must return floats; day returns a date or None.
    """
    revenue: Callable[[Any], float]
    spend: Callable[[Any], float]
    day: Callable[[Any], Optional[date]]


# Typed records already carry parsed values
PERFORMANCE_EXTRACTORS = GroupExtractors(
    revenue=lambda record: record.totalRevenue,
    spend=lambda record: record.adSpend,
    day=lambda record: record.date,
)


def _raw_field(column: str, record: Mapping[str, Any]) -> Any:
    return record.get(column) if isinstance(record, Mapping) else None


# Raw spreadsheet rows, parsed on the fly
RAW_PERFORMANCE_EXTRACTORS = GroupExtractors(
    revenue=lambda record: parse_amount(_raw_field('Total Revenue', record)),
    spend=lambda record: parse_amount(_raw_field('Ad Spend', record)),
    day=lambda record: parse_date(_raw_field('Date', record)),
)


# =============================================================================
# Key Builders
# =============================================================================


def _field_text(record: Any, attribute: str, column: str) -> str:
    """Read a label from a typed record or a raw spreadsheet row."""
    if isinstance(record, Mapping):
        value = record.get(column)
    else:
        value = getattr(record, attribute, None)
    if value is None:
        return ''
    return str(value).strip()


def normalize_offer_name(offer: str, aliases: Optional[Mapping[str, str]] = None) -> str:
    """
    Apply offer alias rewrites.

    An alias matches either the whole name or its trailing words, so with
    {"Banner Edge": "Banner"} both "Banner Edge" and "ACA Banner Edge" are
    rewritten ("ACA Banner").
    """
    if not aliases:
        return offer
    for variant, canonical in aliases.items():
        if offer == variant:
            return canonical
        if offer.endswith(' ' + variant):
            return offer[: -len(variant)] + canonical
    return offer


def network_offer_key(record: Any, aliases: Optional[Mapping[str, str]] = None) -> str:
    """
    Build the "{network} - {offer}" key for a record.

    Example:
        >>> network_offer_key({"Network": "ACA", "Offer": "Banner Edge"}, {"Banner Edge": "Banner"})
        'ACA - Banner'
    """
    network = _field_text(record, 'network', 'Network')
    offer = normalize_offer_name(_field_text(record, 'offer', 'Offer'), aliases)
    return f"{network} - {offer}"


def split_offer_key(key: str) -> Tuple[str, str]:
    """Split a network-offer key back into (network, offer)."""
    network, _, offer = key.partition(' - ')
    return network, offer


def media_buyer_key(record: Any) -> str:
    return _field_text(record, 'mediaBuyer', 'Media Buyer') or UNKNOWN_LABEL


def _record_day(record: Any) -> Optional[date]:
    if isinstance(record, Mapping):
        return parse_date(record.get('Date'))
    return getattr(record, 'date', None)


def day_key(record: Any) -> str:
    day = _record_day(record)
    return day.isoformat() if day else UNDATED_PERIOD


def month_key(record: Any) -> str:
    day = _record_day(record)
    return f"{day.year:04d}-{day.month:02d}" if day else UNDATED_PERIOD


def offer_key_fn(aliases: Optional[Mapping[str, str]]) -> Callable[[Any], str]:
    """Bind an alias table into a network-offer key function."""
    return partial(network_offer_key, aliases=aliases)


# =============================================================================
# Grouping and Reduction
# =============================================================================


def group_by(records: Optional[Iterable[T]], key_fn: Callable[[T], str]) -> Dict[str, List[T]]:
    """
    Group records by key.

    Groups appear in the order their key was first seen. A None input is
    treated as an empty list.

    Args:
        records: Records to group.
        key_fn: Function returning the grouping key for a record.

    Returns:
        Dict[str, List[T]]: Key to records in input order.
    """
    groups: Dict[str, List[T]] = OrderedDict()
    for record in records or []:
        groups.setdefault(key_fn(record), []).append(record)
    return groups


def reduce_group(
    key: str,
    records: Iterable[Any],
    extractors: GroupExtractors = PERFORMANCE_EXTRACTORS,
) -> AggregateGroup:
    """
    Reduce one group to totals and ordered per-day sub-totals.

    Args:
        key: The group's key.
        records: Records belonging to the group.
        extractors: Revenue/spend/day accessors.

    Returns:
        AggregateGroup: Totals plus periods sorted by day, undated last.

    Example:
        >>> group = reduce_group("ACA - Banner", records)
        >>> group.total_margin
        50.0
    """
    group = AggregateGroup(key=key)
    periods: Dict[Optional[date], PeriodTotals] = {}

    for record in records:
        revenue = extractors.revenue(record)
        spend = extractors.spend(record)
        day = extractors.day(record)

        group.total_revenue += revenue
        group.total_spend += spend
        group.records.append(record)

        bucket = periods.get(day)
        if bucket is None:
            bucket = periods[day] = PeriodTotals(period=day)
        bucket.revenue += revenue
        bucket.spend += spend
        bucket.record_count += 1

    dated = sorted((p for d, p in periods.items() if d is not None), key=lambda p: p.period)
    group.periods = dated
    if None in periods:
        logger.debug(f"Group {key!r} has {periods[None].record_count} undated record(s)")
        group.periods.append(periods[None])

    return group


def aggregate(
    records: Optional[Iterable[Any]],
    key_fn: Callable[[Any], str],
    extractors: GroupExtractors = PERFORMANCE_EXTRACTORS,
) -> Dict[str, AggregateGroup]:
    """Group records and reduce every group, preserving first-seen key order."""
    return OrderedDict(
        (key, reduce_group(key, members, extractors))
        for key, members in group_by(records, key_fn).items()
    )


__all__ = [
    'UNKNOWN_LABEL',
    'UNDATED_PERIOD',
    'PeriodTotals',
    'AggregateGroup',
    'GroupExtractors',
    'PERFORMANCE_EXTRACTORS',
    'RAW_PERFORMANCE_EXTRACTORS',
    'normalize_offer_name',
    'network_offer_key',
    'split_offer_key',
    'media_buyer_key',
    'day_key',
    'month_key',
    'offer_key_fn',
    'group_by',
    'reduce_group',
    'aggregate',
]
