"""
Scalewise Backend Package.

FastAPI service layer for the Scalewise performance dashboard. Turns loosely
typed spreadsheet rows into offer and media buyer performance metrics,
scaling recommendations and a forward cash projection.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, database, exceptions and dependencies
    - models: Pydantic schemas and enums
    - services: Parsing, grouping, metrics, scaling and projection logic
    - jobs: Scheduled Slack digest
"""

__version__ = "1.0.0"
