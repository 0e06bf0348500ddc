"""
FastAPI router module for cash projections.

Key Endpoints:
- POST /cash/projection - Day-by-day balance projection over a horizon
- POST /cash/resources - Cash and credit position summary

The projection starts from the total cash across cash accounts, adds
upcoming unpaid network invoices on their due dates, and subtracts payroll,
credit card payments and (optionally) the recent average daily ad spend.
Overdue invoices are reported separately and never projected.
"""

import logging

from fastapi import APIRouter

from scalewise.core.dependencies import SettingsDep
from scalewise.models.schemas import (
    CashProjection,
    CashProjectionRequest,
    DashboardDataset,
    ResourceSummary,
)
from scalewise.services.ingestion import load_dataset, to_financial_resources
from scalewise.services.projection import average_daily_spend, build_cash_projection, summarize_resources

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/projection", response_model=CashProjection)
async def cash_projection(
    request: CashProjectionRequest,
    settings: SettingsDep,
) -> CashProjection:
    """
    Project daily balances from anchorDate over horizonDays.

    Args:
        request: Dataset, optional anchorDate (default today in the reporting
            timezone), optional horizonDays (default from settings) and
            whether to include the average daily ad spend as an outflow.
        settings: Injected application settings.

    Returns:
        CashProjection: Exactly horizonDays days plus totals and invoice partition.

    Example Request:
        POST /cash/projection
        {
            "dataset": {"invoicesData": [...], "financialResources": [...]},
            "anchorDate": "2024-01-05",
            "horizonDays": 30
        }
    """
    typed = load_dataset(request.dataset, settings.reporting_timezone)
    daily_spend = (
        average_daily_spend(typed.performance, settings.average_spend_days)
        if request.includeAverageSpend else 0.0
    )
    return build_cash_projection(
        typed.resources,
        typed.invoices,
        typed.payroll,
        anchor_date=request.anchorDate,
        horizon_days=request.horizonDays,
        daily_spend=daily_spend,
        settings=settings,
    )


@router.post("/resources", response_model=ResourceSummary)
async def cash_resources(
    dataset: DashboardDataset,
    settings: SettingsDep,
) -> ResourceSummary:
    """Total cash, credit available/owing/limit and combined availability."""
    resources = to_financial_resources(dataset.financialResources, settings.reporting_timezone)
    return summarize_resources(resources, settings)


__all__ = ['router']
