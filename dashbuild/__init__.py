"""
Dashbuild Metrics Collection

Collects point-in-time engineering metrics from the GitHub REST API and
accumulates them into per-day history files for dashboard pages.

Package Structure:
    - core: Infrastructure (logging, run tracking)
    - domain: Domain models (snapshots, history entries, constants)
    - collectors: REST client, area fetchers and collection profiles
    - utils: Statistics, datetime and error handling helpers
    - merge_history: History merge & retention store
    - collect_all_metrics: Collection orchestrator and CLI
"""

__version__ = "1.0.0"
