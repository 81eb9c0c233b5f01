"""
Metrics Collection
Prometheus metrics for the agent pipeline
"""

import time

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest


class MetricsCollector:
    """
    Collects and exposes Prometheus metrics for the pipeline service.
    """

    def __init__(self) -> None:
        # Pipeline metrics
        self.pipeline_runs_total = Counter(
            "uiforge_pipeline_runs_total",
            "Total number of pipeline runs",
            ["branch", "status"],
        )
        self.stage_duration = Histogram(
            "uiforge_stage_duration_seconds",
            "Pipeline stage duration in seconds",
            ["stage"],
            buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
        )

        # Generation metrics
        self.generation_attempts = Histogram(
            "uiforge_generation_attempts",
            "Generator calls needed per run",
            buckets=[1, 2, 3],
        )
        self.validation_failures_total = Counter(
            "uiforge_validation_failures_total",
            "Generated code rejected by the validator",
            ["attempt"],
        )
        self.generation_fallbacks_total = Counter(
            "uiforge_generation_fallbacks_total",
            "Runs that fell back to prior code or the placeholder",
            ["fallback"],
        )

        # Parsing metrics
        self.parse_warnings_total = Counter(
            "uiforge_parse_warnings_total",
            "Tolerated structured-output parse failures",
            ["stage", "field"],
        )

        # LLM metrics
        self.llm_calls_total = Counter(
            "uiforge_llm_calls_total",
            "Total number of LLM API calls",
            ["stage", "status"],
        )
        self.llm_duration = Histogram(
            "uiforge_llm_duration_seconds",
            "LLM API call duration in seconds",
            ["stage"],
            buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
        )

        # Stream metrics
        self.stream_events = Counter(
            "uiforge_stream_events_total",
            "Total number of progress events sent",
            ["type"],
        )

        # Error metrics
        self.errors_total = Counter(
            "uiforge_errors_total",
            "Total number of errors",
            ["error_type", "component"],
        )

        self.uptime = Gauge(
            "uiforge_uptime_seconds",
            "Service uptime in seconds",
        )
        self.start_time = time.time()

    def record_pipeline_run(self, branch: str, status: str) -> None:
        """Record a finished pipeline run."""
        self.pipeline_runs_total.labels(branch=branch, status=status).inc()

    def record_stage(self, stage: str, duration: float) -> None:
        self.stage_duration.labels(stage=stage).observe(duration)

    def record_generation(self, attempts: int, fallback: str | None = None) -> None:
        """Record how many generator calls a run needed and any fallback used."""
        self.generation_attempts.observe(attempts)
        if fallback:
            self.generation_fallbacks_total.labels(fallback=fallback).inc()

    def record_validation_failure(self, attempt: int) -> None:
        self.validation_failures_total.labels(attempt=str(attempt)).inc()

    def record_parse_warning(self, stage: str, field: str) -> None:
        self.parse_warnings_total.labels(stage=stage, field=field).inc()

    def record_llm_call(self, stage: str, status: str, duration: float) -> None:
        """Record an LLM API call."""
        self.llm_calls_total.labels(stage=stage, status=status).inc()
        self.llm_duration.labels(stage=stage).observe(duration)

    def record_stream_event(self, event_type: str) -> None:
        self.stream_events.labels(type=event_type).inc()

    def record_error(self, error_type: str, component: str) -> None:
        """Record an error."""
        self.errors_total.labels(error_type=error_type, component=component).inc()

    def update_uptime(self) -> None:
        self.uptime.set(time.time() - self.start_time)

    def get_metrics(self) -> bytes:
        """Get metrics in Prometheus format."""
        self.update_uptime()
        return generate_latest()


# Global metrics collector instance
metrics_collector = MetricsCollector()
