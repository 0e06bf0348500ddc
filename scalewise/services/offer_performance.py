"""
Offer and media buyer performance pipeline.

Runs typed performance records through the grouper, metric calculator and
scaling engine to produce the offer scaling table, per-offer media buyer
breakdowns, cross-offer media buyer performance and day/month summaries.

Pipeline (analyze_offers):
    1. Filter records to the inclusive reporting window
    2. Build the normalized "{network} - {offer}" key (alias table applied)
    3. Drop configured invalid network/offer combinations
    4. Group, reduce, compute metrics, recommend
    5. Split comment revenue from paid media margin, list media buyers
    6. Sort known offers before "Unknown" ones, each by total margin descending

Example:
    offers = analyze_offers(records, start=date(2024, 3, 1), end=date(2024, 3, 31))
    report = build_offer_report(records, start, end)
"""

import logging
from datetime import date, timedelta
from operator import attrgetter
from typing import Iterable, List, Optional

from scalewise.core.config import Settings, get_settings
from scalewise.models import (
    MediaBuyerBreakdown,
    MediaBuyerPerformance,
    MediaBuyerSummary,
    OfferPerformance,
    OfferPerformanceResponse,
    PerformanceRecord,
    PeriodSummary,
)
from scalewise.services.grouping import (
    AggregateGroup,
    UNKNOWN_LABEL,
    aggregate,
    day_key,
    media_buyer_key,
    month_key,
    offer_key_fn,
    split_offer_key,
)
from scalewise.services.metrics import (
    calculate_metrics,
    calculate_profit_margin,
    calculate_roi,
    trend_direction,
)
from scalewise.services.scaling import priority_offers, recommend, summarize_scaling

logger = logging.getLogger(__name__)


# =============================================================================
# Filtering
# =============================================================================


def filter_by_date_range(
    records: Optional[Iterable[PerformanceRecord]],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[PerformanceRecord]:
    """
    Keep records whose day falls inside [start, end].

    With no bounds every record is kept, undated ones included. Once a bound
    is given, undated records cannot be placed and are dropped.
    """
    records = list(records or [])
    if start is None and end is None:
        return records

    kept = []
    for record in records:
        if record.date is None:
            continue
        if start is not None and record.date < start:
            continue
        if end is not None and record.date > end:
            continue
        kept.append(record)
    return kept


def is_excluded_offer(offer_key: str, settings: Settings) -> bool:
    return offer_key in settings.excluded_offer_keys


def _has_unknown(offer_key: str) -> bool:
    return UNKNOWN_LABEL.lower() in offer_key.lower()


def sort_offers(offers: Iterable[OfferPerformance]) -> List[OfferPerformance]:
    """Known offers first, then offers with "unknown" in the key; each by margin descending."""
    offers = list(offers)
    known = [offer for offer in offers if not _has_unknown(offer.offerKey)]
    unknown = [offer for offer in offers if _has_unknown(offer.offerKey)]
    by_margin = attrgetter('totalMargin')
    return sorted(known, key=by_margin, reverse=True) + sorted(unknown, key=by_margin, reverse=True)


# =============================================================================
# Media Buyers
# =============================================================================


def _buyer_summary(group: AggregateGroup) -> MediaBuyerSummary:
    days = group.days_active
    return MediaBuyerSummary(
        mediaBuyer=group.key,
        totalRevenue=group.total_revenue,
        totalSpend=group.total_spend,
        totalMargin=group.total_margin,
        roi=calculate_roi(group.total_margin, group.total_spend),
        daysActive=days,
        avgDailyMargin=group.total_margin / days if days else 0.0,
    )


def _breakdown_for(offer_key: str, records: Iterable[PerformanceRecord]) -> MediaBuyerBreakdown:
    buyers = [_buyer_summary(group) for group in aggregate(records, media_buyer_key).values()]
    buyers.sort(key=lambda buyer: buyer.totalMargin, reverse=True)
    profitable = sum(1 for buyer in buyers if buyer.totalMargin > 0)
    return MediaBuyerBreakdown(
        offerKey=offer_key,
        buyers=buyers,
        profitableBuyers=profitable,
        unprofitableBuyers=len(buyers) - profitable,
    )


def media_buyer_breakdown(
    records: Optional[Iterable[PerformanceRecord]],
    offer_key: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
    settings: Optional[Settings] = None,
) -> MediaBuyerBreakdown:
    """
    Per-buyer totals for one offer in the reporting window.

    A buyer with total margin above zero is profitable; zero or below is not.

    Args:
        records: Typed performance records.
        offer_key: Normalized "{network} - {offer}" key.
        start: Inclusive window start.
        end: Inclusive window end.
        settings: Supplies the offer alias table.
    """
    settings = settings or get_settings()
    key_fn = offer_key_fn(settings.offer_aliases)
    matching = [r for r in filter_by_date_range(records, start, end) if key_fn(r) == offer_key]
    return _breakdown_for(offer_key, matching)


def active_media_buyers(
    records: Optional[Iterable[PerformanceRecord]],
    as_of: date,
    lookback_days: Optional[int] = None,
    settings: Optional[Settings] = None,
) -> List[str]:
    """
    Buyers with activity in the lookback window ending at as_of.

    Buyers listed in Settings.inactive_media_buyers are never returned.
    """
    settings = settings or get_settings()
    window = settings.active_buyer_lookback_days if lookback_days is None else lookback_days
    since = as_of - timedelta(days=window)

    active = {
        media_buyer_key(record)
        for record in records or []
        if record.date is not None and since <= record.date <= as_of
    }
    return sorted(active - set(settings.inactive_media_buyers))


def analyze_media_buyers(
    records: Optional[Iterable[PerformanceRecord]],
    start: Optional[date] = None,
    end: Optional[date] = None,
    as_of: Optional[date] = None,
    settings: Optional[Settings] = None,
) -> List[MediaBuyerPerformance]:
    """
    Metrics per media buyer across all offers, sorted by total margin descending.

    Args:
        records: Typed performance records.
        start: Inclusive window start.
        end: Inclusive window end.
        as_of: Reference day for the activity flag. Defaults to end, or the
            latest dated record.
        settings: Application settings.
    """
    settings = settings or get_settings()
    all_records = list(records or [])
    window = filter_by_date_range(all_records, start, end)
    key_fn = offer_key_fn(settings.offer_aliases)

    if as_of is None:
        dated = [record.date for record in all_records if record.date is not None]
        as_of = end or (max(dated) if dated else None)
    active = set(active_media_buyers(all_records, as_of, settings=settings)) if as_of else set()

    results = []
    for buyer, group in aggregate(window, media_buyer_key).items():
        offers = sorted({key_fn(record) for record in group.records})
        results.append(MediaBuyerPerformance(
            mediaBuyer=buyer,
            offers=offers,
            isActive=buyer in active,
            metrics=calculate_metrics(group),
        ))

    results.sort(key=lambda buyer: buyer.metrics.totalMargin, reverse=True)
    return results


# =============================================================================
# Offers
# =============================================================================


def _offer_performance(group: AggregateGroup, settings: Settings) -> OfferPerformance:
    network, offer = split_offer_key(group.key)
    metrics = calculate_metrics(group)

    comment_buyer = settings.comment_revenue_buyer
    comment_revenue = sum(
        record.totalRevenue for record in group.records if record.mediaBuyer == comment_buyer
    )
    ad_spend_margin = sum(
        record.margin for record in group.records if record.mediaBuyer != comment_buyer
    )
    buyers = sorted({media_buyer_key(record) for record in group.records})

    return OfferPerformance(
        offerKey=group.key,
        network=network,
        offer=offer,
        totalRevenue=group.total_revenue,
        totalSpend=group.total_spend,
        totalMargin=group.total_margin,
        commentRevenue=comment_revenue,
        adSpendMargin=ad_spend_margin,
        daysActive=group.days_active,
        mediaBuyers=buyers,
        trendDirection=trend_direction(metrics.marginTrend),
        metrics=metrics,
        recommendation=recommend(metrics),
    )


def analyze_offers(
    records: Optional[Iterable[PerformanceRecord]],
    start: Optional[date] = None,
    end: Optional[date] = None,
    settings: Optional[Settings] = None,
    include_buyer_breakdown: bool = False,
) -> List[OfferPerformance]:
    """
    Build the offer scaling table.

    Args:
        records: Typed performance records.
        start: Inclusive window start.
        end: Inclusive window end.
        settings: Supplies aliases, excluded combinations and the comment revenue buyer.
        include_buyer_breakdown: Attach a MediaBuyerBreakdown to every offer.

    Returns:
        List[OfferPerformance]: Sorted offers with metrics and recommendations.
    """
    settings = settings or get_settings()
    window = filter_by_date_range(records, start, end)
    groups = aggregate(window, offer_key_fn(settings.offer_aliases))

    offers = []
    excluded = 0
    for key, group in groups.items():
        if is_excluded_offer(key, settings):
            excluded += 1
            continue
        offer = _offer_performance(group, settings)
        if include_buyer_breakdown:
            offer.buyerBreakdown = _breakdown_for(key, group.records)
        offers.append(offer)

    logger.info(
        f"Analyzed {len(window)} records into {len(offers)} offers "
        f"({excluded} excluded combination(s))"
    )
    return sort_offers(offers)


def build_offer_report(
    records: Optional[Iterable[PerformanceRecord]],
    start: Optional[date] = None,
    end: Optional[date] = None,
    settings: Optional[Settings] = None,
    include_buyer_breakdown: bool = False,
) -> OfferPerformanceResponse:
    """Offers plus portfolio scaling insights and priority lists."""
    offers = analyze_offers(records, start, end, settings, include_buyer_breakdown)
    return OfferPerformanceResponse(
        offers=offers,
        insights=summarize_scaling(offers),
        priorities=priority_offers(offers),
        startDate=start,
        endDate=end,
    )


# =============================================================================
# Period Summaries
# =============================================================================


def _period_summaries(records: Optional[Iterable[PerformanceRecord]], key_fn) -> List[PeriodSummary]:
    summaries = [
        PeriodSummary(
            period=key,
            totalRevenue=group.total_revenue,
            totalSpend=group.total_spend,
            totalMargin=group.total_margin,
            roi=calculate_roi(group.total_margin, group.total_spend),
            profitMargin=calculate_profit_margin(group.total_revenue, group.total_spend),
        )
        for key, group in aggregate(records, key_fn).items()
    ]
    # ISO keys sort chronologically; 'undated' sorts after digits
    return sorted(summaries, key=lambda summary: summary.period)


def daily_totals(records: Optional[Iterable[PerformanceRecord]]) -> List[PeriodSummary]:
    """Revenue, spend, margin and ROI per calendar day, ascending."""
    return _period_summaries(records, day_key)


def monthly_totals(records: Optional[Iterable[PerformanceRecord]]) -> List[PeriodSummary]:
    """Revenue, spend, margin and ROI per calendar month, ascending."""
    return _period_summaries(records, month_key)


__all__ = [
    'filter_by_date_range',
    'is_excluded_offer',
    'sort_offers',
    'media_buyer_breakdown',
    'active_media_buyers',
    'analyze_media_buyers',
    'analyze_offers',
    'build_offer_report',
    'daily_totals',
    'monthly_totals',
]
