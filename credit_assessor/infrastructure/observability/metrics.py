"""Prometheus metrics for monitoring analysis outcomes, fallback usage, and model latency"""

from prometheus_client import Counter, Histogram

# Analysis metrics
analysis_counter = Counter(
    "credit_analysis_total",
    "Total credit analyses completed",
    ["source"],  # model | fallback
)

rating_counter = Counter(
    "credit_recommendation_rating_total",
    "Credit recommendations issued by rating",
    ["rating"],
)

# Document metrics
document_failure_counter = Counter(
    "document_processing_failures_total",
    "Documents that could not be processed",
)

# Model API metrics
model_latency_histogram = Histogram(
    "model_request_latency_seconds",
    "Ollama generate call latency",
    ["model"],
    buckets=[1.0, 5.0, 15.0, 30.0, 60.0, 120.0, 180.0],
)

model_failure_counter = Counter(
    "model_request_failures_total",
    "Failed Ollama generate calls",
    ["model"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_analysis(used_fallback: bool, rating: str) -> None:
    """Record which path produced the recommendation and its rating"""
    source = "fallback" if used_fallback else "model"
    analysis_counter.labels(source=source).inc()
    rating_counter.labels(rating=rating).inc()
