"""
FastAPI router module for triggering scheduled jobs on demand.

Key Endpoints:
- POST /jobs/weekly-digest - Build and post the weekly Slack digest

The scheduler calls the same endpoint; idempotency is enforced by the job
itself, so repeated calls for the same week are skipped unless force=true.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException

from scalewise.core.dependencies import SettingsDep, StoreDep
from scalewise.jobs.slack_digest import send_weekly_digest
from scalewise.models.schemas import WeeklyDigestRequest
from scalewise.services.ingestion import to_performance_records

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/weekly-digest")
async def weekly_digest(
    request: WeeklyDigestRequest,
    settings: SettingsDep,
    store: StoreDep,
) -> Dict[str, Any]:
    """
    Send the weekly performance digest to Slack.

    Returns the job result dict. A skipped run (already sent, no webhook
    configured, no activity) is a 200; a Slack delivery failure is a 502.
    """
    records = to_performance_records(request.dataset.performanceData, settings.reporting_timezone)
    result = await send_weekly_digest(
        records,
        store,
        end_date=request.endDate,
        force=request.force,
        settings=settings,
    )

    if not result.get('success') and not result.get('skipped'):
        raise HTTPException(status_code=502, detail=result.get('error', 'Slack delivery failed'))
    return result


__all__ = ['router']
