"""
FastAPI router module for offer performance and scaling recommendations.

This module exposes the offer scaling table used by the dashboard. Each
request carries the raw spreadsheet datasets; rows are converted to typed
records, filtered to the reporting window, grouped by normalized
"{network} - {offer}" key and scored.

Key Endpoints:
- POST /offers/performance - Offer table with metrics, recommendations,
  portfolio scaling insights and priority lists
- POST /offers/recommendation - Recommendation for a single metrics bundle
- POST /offers/media-buyers - Per-buyer breakdown for one offer
- POST /offers/totals - Revenue/spend/margin per day or month

All endpoints are pure computations over the posted data; nothing is
persisted.
"""

import logging
from typing import List

from fastapi import APIRouter, Query

from scalewise.core.dependencies import SettingsDep
from scalewise.models.schemas import (
    DateRangeRequest,
    MediaBuyerBreakdown,
    MediaBuyerBreakdownRequest,
    OfferPerformanceRequest,
    OfferPerformanceResponse,
    PerformanceMetrics,
    PeriodSummary,
    ScalingRecommendation,
)
from scalewise.services.ingestion import to_performance_records
from scalewise.services.offer_performance import (
    build_offer_report,
    daily_totals,
    filter_by_date_range,
    media_buyer_breakdown,
    monthly_totals,
)
from scalewise.services.scaling import recommend


# =============================================================================
# Module Configuration
# =============================================================================

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# POST /offers/performance
# =============================================================================


@router.post("/performance", response_model=OfferPerformanceResponse)
async def offer_performance(
    request: OfferPerformanceRequest,
    settings: SettingsDep,
) -> OfferPerformanceResponse:
    """
    Build the offer scaling table for the requested window.

    Offers are sorted with fully identified offers first, then offers with
    an Unknown network or offer, each by total margin descending. Excluded
    network/offer combinations from settings are dropped.

    Args:
        request: Dataset, optional startDate/endDate (inclusive) and whether
            to attach a per-buyer breakdown to every offer.
        settings: Injected application settings.

    Returns:
        OfferPerformanceResponse: offers, insights, priorities and the window.

    Example Request:
        POST /offers/performance
        {
            "dataset": {"performanceData": [...]},
            "startDate": "2024-03-01",
            "endDate": "2024-03-14"
        }
    """
    records = to_performance_records(request.dataset.performanceData, settings.reporting_timezone)
    return build_offer_report(
        records,
        start=request.startDate,
        end=request.endDate,
        settings=settings,
        include_buyer_breakdown=request.includeBuyerBreakdown,
    )


# =============================================================================
# POST /offers/recommendation
# =============================================================================


@router.post("/recommendation", response_model=ScalingRecommendation)
async def offer_recommendation(metrics: PerformanceMetrics) -> ScalingRecommendation:
    """Return the scaling recommendation for a precomputed metrics bundle."""
    return recommend(metrics)


# =============================================================================
# POST /offers/media-buyers
# =============================================================================


@router.post("/media-buyers", response_model=MediaBuyerBreakdown)
async def offer_media_buyers(
    request: MediaBuyerBreakdownRequest,
    settings: SettingsDep,
) -> MediaBuyerBreakdown:
    """
    Per-buyer totals for one offer.

    An unknown offer key yields an empty breakdown rather than a 404, since
    the key may simply have no rows in the window.
    """
    records = to_performance_records(request.dataset.performanceData, settings.reporting_timezone)
    return media_buyer_breakdown(
        records,
        request.offerKey,
        start=request.startDate,
        end=request.endDate,
        settings=settings,
    )


# =============================================================================
# POST /offers/totals
# =============================================================================


@router.post("/totals", response_model=List[PeriodSummary])
async def offer_totals(
    request: DateRangeRequest,
    settings: SettingsDep,
    period: str = Query(default="day", pattern="^(day|month)$", description="Bucket size: day or month"),
) -> List[PeriodSummary]:
    """Revenue, spend, margin and ROI per calendar day or month, ascending."""
    records = to_performance_records(request.dataset.performanceData, settings.reporting_timezone)
    window = filter_by_date_range(records, request.startDate, request.endDate)
    if period == "month":
        return monthly_totals(window)
    return daily_totals(window)


__all__ = ['router']
