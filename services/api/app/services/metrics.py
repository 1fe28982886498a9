"""Prometheus counters.

Observational only: nothing reads them back.
"""

from prometheus_client import Counter

REQUESTS = Counter("rank_api_requests_total", "Total requests", ["route"])
SCORES_SUBMITTED = Counter("rank_api_scores_total", "Scores applied to items")
