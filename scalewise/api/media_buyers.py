"""
FastAPI router module for media buyer performance.

Key Endpoints:
- POST /media-buyers/performance - Metrics per media buyer across all offers
- POST /media-buyers/active - Buyers with recent activity
"""

import logging
from typing import List

from fastapi import APIRouter

from scalewise.core.dependencies import SettingsDep
from scalewise.models.schemas import DateRangeRequest, MediaBuyerPerformance
from scalewise.services.ingestion import to_performance_records
from scalewise.services.offer_performance import active_media_buyers, analyze_media_buyers
from scalewise.services.parsing import today_in

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/performance", response_model=List[MediaBuyerPerformance])
async def media_buyer_performance(
    request: DateRangeRequest,
    settings: SettingsDep,
) -> List[MediaBuyerPerformance]:
    """
    Metrics per media buyer for the requested window, best margin first.

    isActive reflects activity in the lookback window ending at endDate (or
    the latest dated record when no endDate is given).
    """
    records = to_performance_records(request.dataset.performanceData, settings.reporting_timezone)
    return analyze_media_buyers(
        records,
        start=request.startDate,
        end=request.endDate,
        settings=settings,
    )


@router.post("/active", response_model=List[str])
async def media_buyers_active(
    request: DateRangeRequest,
    settings: SettingsDep,
) -> List[str]:
    """Buyers with rows in the lookback window ending at endDate (default today)."""
    records = to_performance_records(request.dataset.performanceData, settings.reporting_timezone)
    as_of = request.endDate or today_in(settings.reporting_timezone)
    return active_media_buyers(records, as_of, settings=settings)


__all__ = ['router']
