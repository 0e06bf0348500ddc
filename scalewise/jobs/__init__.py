"""
Scheduled Automation Jobs for Scalewise.

This module provides scheduled job functions for automated reporting:
- Slack weekly performance digest (slack_digest.py)

Idempotency Guarantees:
-----------------------
- Slack digest: Never duplicates digests for the same report end date. The
  job records successful sends in the key-value store under
  "slack_digest:weekly:<date>".

- Force flag (force=True) allows intentional re-sends for manual corrections.

Environment Requirements:
-------------------------
- SLACK_WEBHOOK_URL: Slack incoming webhook URL in format:
  https://hooks.slack.com/services/xxx/yyy/zzz

Usage Examples:
---------------
    from scalewise.jobs import send_weekly_digest, check_already_sent

    result = await send_weekly_digest(records, store=store)
    already = await check_already_sent(store, date(2024, 3, 17))
"""

# =============================================================================
# Slack Digest Exports
# =============================================================================

from scalewise.jobs.slack_digest import (
    # Report building
    WeeklyReport,
    build_weekly_report,
    format_digest_blocks,
    # Main job function
    send_weekly_digest,
    # Idempotency check function
    check_already_sent,
)

# =============================================================================
# Public API Declaration
# =============================================================================

__all__ = [
    'WeeklyReport',             # Weekly totals and ranked offers/buyers
    'build_weekly_report',      # Summarize the seven days ending on a date
    'format_digest_blocks',     # Slack Block Kit formatting
    'send_weekly_digest',       # Send Slack digest notification
    'check_already_sent',       # Check if digest already sent (idempotency)
]
