from prometheus_client import Counter, Histogram, REGISTRY


# we check if they are already registered to avoid errors during hot reloads or test runs
def get_or_create_metric(name, documentation, metric_type, **kwargs):
    try:
        return metric_type(name, documentation, **kwargs)
    except ValueError:
        return REGISTRY._names_to_collectors[name]


REQUESTS_TOTAL = get_or_create_metric(
    "taskgrove_requests_total",
    "Total requests",
    Counter,
    labelnames=["endpoint", "status"],
)

REQUEST_LATENCY_SECONDS = get_or_create_metric(
    "taskgrove_request_latency_seconds",
    "Request latency",
    Histogram,
    labelnames=["endpoint"],
)

CANDIDATES_EXTRACTED_TOTAL = get_or_create_metric(
    "taskgrove_candidates_extracted_total", "Candidate tasks extracted from media", Counter
)

TASKS_SAVED_TOTAL = get_or_create_metric(
    "taskgrove_tasks_saved_total", "Tasks persisted", Counter
)

BATCH_SKIPPED_TOTAL = get_or_create_metric(
    "taskgrove_batch_skipped_total", "Candidates skipped during batch save", Counter
)

ERRORS_TOTAL = get_or_create_metric(
    "taskgrove_errors_total", "Errors surfaced to clients", Counter, labelnames=["kind"]
)
