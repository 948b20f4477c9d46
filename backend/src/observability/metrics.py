"""Prometheus metrics for the picklist matcher.

Defines operational metrics for matching quality and catalog size.
Exposition (HTTP endpoint, push gateway) is left to the hosting process.
"""

from prometheus_client import Counter, Histogram, Gauge

# Matching metrics
match_outcomes_total = Counter(
    "picklist_match_outcomes_total",
    "Total match attempts by winning strategy",
    ["method"]  # method: exact_prefix|brand|multi_word|single_word|preference|none
)

match_duration_seconds = Histogram(
    "picklist_match_duration_seconds",
    "Time spent matching a single order item in seconds",
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0]
)

# Picklist metrics
picklist_lines_total = Counter(
    "picklist_lines_total",
    "Total picklist lines assembled",
    ["status"]  # status: priced|unpriced
)

# Catalog metrics
catalog_entries = Gauge(
    "picklist_catalog_entries",
    "Number of catalog rows in the most recently built index"
)
