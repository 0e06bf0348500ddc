"""
Slack weekly performance digest job for Scalewise.

This module posts a weekly performance summary to Slack: totals for the
seven days ending on the report date, overall ROI, top and underperforming
offers, and top and struggling media buyers. It integrates with Slack using
the WebhookClient from slack-sdk.

Key Features:
- Builds the weekly report from typed performance records with the same
  grouping and metric services the API uses
- Formats a Slack Block Kit message
- Idempotent per report end date via the key-value store

Idempotency Guarantees:
- A digest is never posted twice for the same end date
- The marker lives in the key-value store under "slack_digest:weekly:<date>"
- force=True bypasses the check

Environment Requirements:
- SLACK_WEBHOOK_URL: Slack incoming webhook URL
  Format: https://hooks.slack.com/services/xxx/yyy/zzz

Usage:
    # Send the digest for the week ending yesterday (reporting timezone)
    result = await send_weekly_digest(records, store=store)

    # Specific end date, bypassing idempotency
    result = await send_weekly_digest(records, end_date=date(2024, 3, 17), store=store, force=True)
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from slack_sdk.webhook import WebhookClient

from scalewise.core.config import Settings, get_settings
from scalewise.core.exceptions import StoreUnavailableError
from scalewise.models import PerformanceRecord
from scalewise.services.grouping import aggregate, media_buyer_key, offer_key_fn
from scalewise.services.kv_store import KeyValueStore
from scalewise.services.metrics import calculate_roi
from scalewise.services.offer_performance import filter_by_date_range, is_excluded_offer
from scalewise.services.parsing import today_in

logger = logging.getLogger(__name__)

REPORT_WINDOW_DAYS: int = 7
MAX_ENTRIES_PER_SECTION: int = 5
DIGEST_KEY_PREFIX = "slack_digest:weekly:"


# =============================================================================
# Report Data Classes
# =============================================================================


@dataclass
class RankedEntry:
    """
    One offer or media buyer line in the digest.

    Attributes:
        name: Offer key or media buyer name.
        revenue: Revenue in the window.
        spend: Ad spend in the window.
        profit: Revenue minus spend.
        roi: profit / spend * 100.
    """
    name: str
    revenue: float
    spend: float
    profit: float
    roi: float


@dataclass
class WeeklyReport:
    """
    Weekly performance summary.

    Attributes:
        start_date: First day of the window (inclusive).
        end_date: Last day of the window (inclusive).
        total_revenue: Revenue across all records in the window.
        total_spend: Spend across all records in the window.
        top_offers: Profitable offers, best first.
        underperforming_offers: Offers with negative profit, worst first.
        top_buyers: Profitable media buyers, best first.
        struggling_buyers: Media buyers with negative profit, worst first.
    """
    start_date: date
    end_date: date
    total_revenue: float = 0.0
    total_spend: float = 0.0
    top_offers: List[RankedEntry] = field(default_factory=list)
    underperforming_offers: List[RankedEntry] = field(default_factory=list)
    top_buyers: List[RankedEntry] = field(default_factory=list)
    struggling_buyers: List[RankedEntry] = field(default_factory=list)

    @property
    def total_profit(self) -> float:
        return self.total_revenue - self.total_spend

    @property
    def roi(self) -> float:
        return calculate_roi(self.total_profit, self.total_spend)

    @property
    def date_range_label(self) -> str:
        return f"{self.start_date.strftime('%b %d, %Y')} - {self.end_date.strftime('%b %d, %Y')}"


# =============================================================================
# Report Building
# =============================================================================


def _rank(groups: Iterable[Any], limit: int) -> Dict[str, List[RankedEntry]]:
    entries = [
        RankedEntry(
            name=group.key,
            revenue=group.total_revenue,
            spend=group.total_spend,
            profit=group.total_margin,
            roi=calculate_roi(group.total_margin, group.total_spend),
        )
        for group in groups
    ]
    winners = sorted((e for e in entries if e.profit > 0), key=lambda e: e.profit, reverse=True)
    losers = sorted((e for e in entries if e.profit < 0), key=lambda e: e.profit)
    return {'top': winners[:limit], 'bottom': losers[:limit]}


def build_weekly_report(
    records: Iterable[PerformanceRecord],
    end_date: date,
    settings: Optional[Settings] = None,
) -> WeeklyReport:
    """
    Summarize the seven days ending on end_date.

    Offers use the normalized network-offer key with excluded combinations
    removed; totals include every record in the window.

    Args:
        records: Typed performance records.
        end_date: Last day of the report window (inclusive).
        settings: Supplies the alias table and excluded combinations.

    Returns:
        WeeklyReport: Totals plus ranked offers and buyers.
    """
    settings = settings or get_settings()
    start_date = end_date - timedelta(days=REPORT_WINDOW_DAYS - 1)
    window = filter_by_date_range(records, start_date, end_date)

    offer_groups = [
        group for key, group in aggregate(window, offer_key_fn(settings.offer_aliases)).items()
        if not is_excluded_offer(key, settings)
    ]
    buyer_groups = aggregate(window, media_buyer_key).values()

    offers = _rank(offer_groups, MAX_ENTRIES_PER_SECTION)
    buyers = _rank(buyer_groups, MAX_ENTRIES_PER_SECTION)

    return WeeklyReport(
        start_date=start_date,
        end_date=end_date,
        total_revenue=sum(record.totalRevenue for record in window),
        total_spend=sum(record.adSpend for record in window),
        top_offers=offers['top'],
        underperforming_offers=offers['bottom'],
        top_buyers=buyers['top'],
        struggling_buyers=buyers['bottom'],
    )


# =============================================================================
# Slack Message Formatting
# =============================================================================


def _currency(amount: float) -> str:
    sign = '-' if amount < 0 else ''
    return f"{sign}${abs(amount):,.2f}"


def _ranked_section(title: str, entries: List[RankedEntry], show_spend: bool) -> List[Dict[str, Any]]:
    if not entries:
        return []
    blocks: List[Dict[str, Any]] = [
        {"type": "divider"},
        {"type": "section", "text": {"type": "mrkdwn", "text": f"*{title}*"}},
    ]
    for index, entry in enumerate(entries, start=1):
        volume = f"Spend: {_currency(entry.spend)}" if show_spend else f"Revenue: {_currency(entry.revenue)}"
        blocks.append({
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": (
                    f"*{index}. {entry.name or 'Unknown'}*\n"
                    f"{volume} | Profit: {_currency(entry.profit)} | ROI: {entry.roi:.1f}%"
                ),
            },
        })
    return blocks


def format_digest_blocks(report: WeeklyReport) -> List[Dict[str, Any]]:
    """
    Format a weekly report into Slack Block Kit blocks.

    Sections: header, date range, revenue/spend, profit/ROI, then top offers,
    underperforming offers, top buyers and struggling buyers when present,
    and a context footer.
    """
    generated = datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M UTC')

    blocks: List[Dict[str, Any]] = [
        {
            "type": "header",
            "text": {"type": "plain_text", "text": ":bar_chart: Weekly Performance Update", "emoji": True},
        },
        {
            "type": "section",
            "text": {"type": "mrkdwn", "text": f"*Weekly performance update for {report.date_range_label}*"},
        },
        {"type": "divider"},
        {
            "type": "section",
            "fields": [
                {"type": "mrkdwn", "text": f"*Total Revenue:*\n{_currency(report.total_revenue)}"},
                {"type": "mrkdwn", "text": f"*Total Ad Spend:*\n{_currency(report.total_spend)}"},
            ],
        },
        {
            "type": "section",
            "fields": [
                {"type": "mrkdwn", "text": f"*Total Profit:*\n{_currency(report.total_profit)}"},
                {"type": "mrkdwn", "text": f"*Overall ROI:*\n{report.roi:.2f}%"},
            ],
        },
    ]

    blocks.extend(_ranked_section("Top Performing Offers :rocket:", report.top_offers, show_spend=False))
    blocks.extend(_ranked_section("Underperforming Offers :warning:", report.underperforming_offers, show_spend=False))
    blocks.extend(_ranked_section("Top Media Buyers :star:", report.top_buyers, show_spend=True))
    blocks.extend(_ranked_section("Struggling Media Buyers :chart_with_downwards_trend:", report.struggling_buyers, show_spend=True))

    blocks.append({"type": "divider"})
    blocks.append({
        "type": "context",
        "elements": [{"type": "mrkdwn", "text": f"Generated at {generated} | Scalewise"}],
    })
    return blocks


# =============================================================================
# Idempotency
# =============================================================================


def digest_key(end_date: date) -> str:
    return f"{DIGEST_KEY_PREFIX}{end_date.isoformat()}"


async def check_already_sent(store: KeyValueStore, end_date: date) -> bool:
    """Return True when a digest for end_date has been recorded."""
    return await store.exists(digest_key(end_date))


async def mark_digest_sent(store: KeyValueStore, end_date: date) -> None:
    """Record that the digest for end_date was posted."""
    previous = await store.load(digest_key(end_date), {}) or {}
    await store.save(digest_key(end_date), {
        'sent_at': datetime.now(timezone.utc).isoformat(),
        'send_count': int(previous.get('send_count', 0)) + 1,
    })


# =============================================================================
# Main Entry Point
# =============================================================================


async def send_weekly_digest(
    records: Iterable[PerformanceRecord],
    store: KeyValueStore,
    end_date: Optional[date] = None,
    force: bool = False,
    settings: Optional[Settings] = None,
    client: Optional[WebhookClient] = None,
) -> Dict[str, Any]:
    """
    Send the weekly Slack performance digest.

    Steps:
    1. Validate that SLACK_WEBHOOK_URL is configured
    2. Check idempotency (unless force=True)
    3. Build the weekly report and format Block Kit blocks
    4. Post via the Slack webhook
    5. Record the send in the key-value store

    Args:
        records: Typed performance records.
        store: Key-value store holding idempotency markers.
        end_date: Last day of the window. Defaults to yesterday in the
            reporting timezone.
        force: Send even if a digest was already recorded for end_date.
        settings: Application settings.
        client: Webhook client; built from settings when omitted.

    Returns:
        Dict with:
        - success: True if sent or skipped appropriately
        - skipped: True if skipped (already sent or no activity)
        - reason: Reason for skip
        - date: Report end date as ISO string
        - error: Error message (if failed)
    """
    settings = settings or get_settings()

    if not settings.slack_webhook_url and client is None:
        logger.info("SLACK_WEBHOOK_URL not configured, skipping weekly digest")
        return {
            'success': False,
            'skipped': True,
            'reason': 'SLACK_WEBHOOK_URL not configured',
        }

    target_date = end_date or (today_in(settings.reporting_timezone) - timedelta(days=1))

    if not force:
        try:
            if await check_already_sent(store, target_date):
                return {
                    'success': True,
                    'skipped': True,
                    'reason': f'Digest already sent for {target_date}',
                    'date': str(target_date),
                }
        except StoreUnavailableError as e:
            # Without the marker the worst case is a duplicate post
            logger.warning(f"Could not check digest state for {target_date}: {e}")

    report = build_weekly_report(records, target_date, settings)
    if report.total_revenue == 0 and report.total_spend == 0:
        return {
            'success': True,
            'skipped': True,
            'reason': f'No performance data for week ending {target_date}',
            'date': str(target_date),
        }

    blocks = format_digest_blocks(report)
    webhook = client or WebhookClient(settings.slack_webhook_url)

    try:
        response = webhook.send(blocks=blocks)
    except OSError as e:
        logger.error(f"Failed to send Slack digest for {target_date}: {e}")
        return {
            'success': False,
            'error': f'Failed to send Slack message: {e}',
            'date': str(target_date),
        }

    if response.status_code != 200:
        logger.error(f"Slack returned {response.status_code} for digest {target_date}: {response.body}")
        return {
            'success': False,
            'error': f'Slack API returned status {response.status_code}: {response.body}',
            'date': str(target_date),
        }

    try:
        await mark_digest_sent(store, target_date)
    except StoreUnavailableError as e:
        logger.warning(f"Digest for {target_date} sent but not recorded: {e}")

    logger.info(f"Sent weekly digest for {report.date_range_label}")
    return {
        'success': True,
        'date': str(target_date),
        'total_revenue': report.total_revenue,
        'total_spend': report.total_spend,
        'total_profit': report.total_profit,
    }


__all__ = [
    'RankedEntry',
    'WeeklyReport',
    'build_weekly_report',
    'format_digest_blocks',
    'digest_key',
    'check_already_sent',
    'mark_digest_sent',
    'send_weekly_digest',
]
