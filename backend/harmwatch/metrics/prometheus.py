from prometheus_client import Counter, Histogram

api_request_latency_seconds = Histogram(
    "api_request_latency_seconds",
    "API request latency in seconds",
    ["route", "method", "status"],
)

cases_submitted_total = Counter(
    "cases_submitted_total",
    "Total cases submitted",
    ["category"],
)

case_updates_total = Counter(
    "case_updates_total",
    "Case update attempts by outcome",
    ["outcome"],  # updated/forbidden/not_found/invalid
)

evidence_added_total = Counter(
    "evidence_added_total",
    "Total evidence records attached to cases",
    ["type"],
)

auth_events_total = Counter(
    "auth_events_total",
    "Registration and login attempts by outcome",
    ["event", "outcome"],
)

store_write_failures_total = Counter(
    "store_write_failures_total",
    "Failed collection writes",
    ["collection"],
)
