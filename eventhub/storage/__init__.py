"""
Event and user persistence.

Responsibilities:
- Define the repository interfaces the discovery engine and services depend on.
- Provide a pandas-backed in-memory store for development and tests.
- Provide MongoDB repositories using native geo and aggregation queries.
"""
