"""Prometheus metrics for the confirmation workflow."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

preview_requests_total = Counter(
    "rallypay_preview_requests_total",
    "Reward/cost preview requests by outcome",
    ["status"],
)

preview_request_duration_seconds = Histogram(
    "rallypay_preview_request_duration_seconds",
    "Wall time of a preview request",
    ["status"],
)

commit_requests_total = Counter(
    "rallypay_commit_requests_total",
    "Commit attempts by outcome",
    ["status"],
)

commit_request_duration_seconds = Histogram(
    "rallypay_commit_request_duration_seconds",
    "Wall time of a commit attempt",
    ["status"],
)
