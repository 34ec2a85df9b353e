"""Prometheus metrics for the Nutanix Cluster Operator."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "nutanix_cluster_operator_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "nutanix_cluster_operator_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
)

error_total = Counter(
    "nutanix_cluster_operator_error_total",
    "Total number of reconciliation errors",
    ["kind", "error_type"],
)

resource_status_total = Counter(
    "nutanix_cluster_operator_resource_status_total",
    "Resource status observations",
    ["kind", "status"],
)

# Shared secret / config map finalizer bookkeeping
reference_finalizer_operations_total = Counter(
    "nutanix_cluster_operator_reference_finalizer_operations_total",
    "Finalizer changes made on shared referenced objects",
    ["kind", "operation"],
)

# API call metrics
api_call_total = Counter(
    "nutanix_cluster_operator_api_call_total",
    "Total number of API calls",
    ["api_type", "operation", "result"],
)

api_call_duration_seconds = Histogram(
    "nutanix_cluster_operator_api_call_duration_seconds",
    "Duration of API calls in seconds",
    ["api_type", "operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)

rate_limit_hits_total = Counter(
    "nutanix_cluster_operator_rate_limit_hits_total",
    "Total number of rate limit hits",
    ["api_type"],
)

# Prism Central task metrics
task_polls_total = Counter(
    "nutanix_cluster_operator_task_polls_total",
    "Total number of Prism Central task status polls",
    ["status"],
)

task_wait_total = Counter(
    "nutanix_cluster_operator_task_wait_total",
    "Outcomes of waiting for Prism Central tasks",
    ["result"],
)

task_wait_duration_seconds = Histogram(
    "nutanix_cluster_operator_task_wait_duration_seconds",
    "Time spent waiting for Prism Central tasks in seconds",
    buckets=[0.5, 1.0, 5.0, 15.0, 30.0, 60.0, 300.0],
)
