"""Prometheus metrics for the webhook relay.

Provides counters and histograms for inbound hits, forwarding outcomes
and retention sweeps.
"""

from prometheus_client import Counter, Histogram

# Receive metrics
HITS_RECEIVED = Counter(
    "webhook_relay_hits_received_total",
    "Total number of inbound webhook requests accepted",
    labelnames=["endpoint", "variant"],
)

HITS_PERSISTED = Counter(
    "webhook_relay_hits_persisted_total",
    "Total number of hits written to storage",
    labelnames=["endpoint"],
)

AUTH_FAILURES = Counter(
    "webhook_relay_auth_failures_total",
    "Total number of rejected credentials",
    labelnames=["kind"],
)

# Forward metrics
FORWARDS = Counter(
    "webhook_relay_forwards_total",
    "Total number of forward attempts",
    labelnames=["endpoint", "outcome"],
)

FORWARD_LATENCY = Histogram(
    "webhook_relay_forward_latency_seconds",
    "Forward request latency in seconds",
    labelnames=["endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# Background task metrics
BACKGROUND_TASKS = Counter(
    "webhook_relay_background_tasks_total",
    "Background tasks by final state",
    labelnames=["name", "state"],
)

# Retention metrics
HITS_PURGED = Counter(
    "webhook_relay_hits_purged_total",
    "Total number of hits deleted by the retention sweep",
)

ALIASES_RESOLVED = Counter(
    "webhook_relay_aliases_resolved_total",
    "Aliases created from LINE profile lookups",
    labelnames=["kind"],
)
