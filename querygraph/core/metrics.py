"""Prometheus metrics for QueryGraph.

Every metric lives in this module and carries the ``querygraph_`` prefix;
other modules import the objects they record into.
"""

from prometheus_client import Counter, Histogram, Info

app_info = Info("querygraph_app", "QueryGraph version and environment")

# HTTP, labelled by route template
http_requests_total = Counter(
    "querygraph_http_requests_total",
    "HTTP requests served, by method, route and status code",
    ["method", "path", "status"],
)
http_request_duration_seconds = Histogram(
    "querygraph_http_request_duration_seconds",
    "Time spent serving an HTTP request",
    ["method", "path"],
)

# Graph compilation (pure, no I/O)
query_compilation_duration_seconds = Histogram(
    "querygraph_query_compilation_duration_seconds",
    "Node graph to SQL compilation duration in seconds",
    buckets=[0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1],
)
query_compilation_errors_total = Counter(
    "querygraph_query_compilation_errors_total",
    "Node graph compilations that failed, by error class",
    ["error"],
)

# Engine round trips; kind is "page" or "count"
query_execution_duration_seconds = Histogram(
    "querygraph_query_execution_duration_seconds",
    "Time DuckDB took to run a compiled query",
    ["kind"],
)
query_result_rows = Histogram(
    "querygraph_query_result_rows",
    "Rows returned in one page of results",
    buckets=[0, 1, 10, 50, 100, 500, 1000, 5000, 10000],
)
