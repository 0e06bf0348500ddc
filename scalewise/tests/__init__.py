'''
Scalewise Test Suite

Test Modules:
-------------
- test_config.py: Settings defaults and environment overrides
- test_parsing.py: Currency amounts, date layouts, same-day comparison
- test_grouping.py: Key builders, grouping and per-group totals
- test_metrics.py: ROI, consistency, trends, performance score
- test_scaling.py: Ordered recommendation rules and portfolio helpers
- test_projection.py: Invoice partition, resources, daily balance projection
- test_ingestion.py: Spreadsheet rows and CSV exports to typed records
- test_offer_performance.py: Offer table, insights, media buyers, period totals
- test_kv_store.py: In-memory and PostgreSQL key-value stores
- test_jobs.py: Weekly Slack digest formatting and idempotency
- test_api.py: FastAPI endpoints with overridden dependencies

Running Tests:
--------------
    pip install -e ".[test]"
    pytest scalewise/tests -v

Configuration:
--------------
See conftest.py for shared fixtures and test configuration.
'''

__all__ = []
