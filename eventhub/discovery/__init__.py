"""
Event discovery engine.

Responsibilities:
- Encode coordinates and convert distances for geospatial queries.
- Resolve event filters and location selectors into repository queries.
- Merge in-person and online result branches and paginate them.
- Score events against a user and rank recommendations and trending events.
"""
