from prometheus_client import Counter, Histogram

# Pipeline-level metrics
PIPELINES_STARTED = Counter(
    "snapsolve_pipelines_started_total", "Pipelines started", ["kind"]
)
PIPELINES_COMPLETED = Counter(
    "snapsolve_pipelines_completed_total", "Pipelines completed", ["kind"]
)
PIPELINES_CANCELED = Counter(
    "snapsolve_pipelines_canceled_total", "Pipelines canceled", ["kind"]
)
PIPELINE_ERRORS = Counter(
    "snapsolve_pipeline_errors_total", "Pipeline errors", ["kind", "error"]
)
STEP_DURATION_SECONDS = Histogram(
    "snapsolve_step_duration_seconds", "Pipeline step duration seconds", ["step"]
)

# Parser-level metrics
PARSE_OUTCOMES = Counter(
    "snapsolve_parse_outcomes_total",
    "Response parser results by schema and strategy",
    ["schema", "strategy"],
)

# Provider-level metrics
PROVIDER_LATENCY_SECONDS = Histogram(
    "snapsolve_provider_latency_seconds",
    "Provider call latency seconds",
    ["provider", "purpose"],
)


def observe_step(step: str, seconds: float) -> None:
    """Record how long a pipeline step took."""
    STEP_DURATION_SECONDS.labels(step=step).observe(max(0.0, seconds))


def observe_provider_call(provider: str, purpose: str, seconds: float) -> None:
    PROVIDER_LATENCY_SECONDS.labels(provider=provider, purpose=purpose).observe(
        max(0.0, float(seconds))
    )


def record_parse(schema: str, strategy: str) -> None:
    PARSE_OUTCOMES.labels(schema=schema, strategy=strategy).inc()
