"""
Place discovery pipeline.

Responsibilities:
- Resolve free-text city names to a coordinate and bounding box (geocoder).
- Fetch category-filtered points of interest inside that box (POI provider).
- Normalize, rate, deduplicate and sort the raw records (ranking).
- Discard results of searches superseded by a newer one (pipeline).
"""
