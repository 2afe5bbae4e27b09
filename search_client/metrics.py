from typing import Dict, Any, List
from prometheus_client import Counter, Histogram, Gauge, CollectorRegistry, generate_latest

BASE_METRICS = {
    "requests_total": 0,
    "requests_success": 0,
    "requests_failed": 0,
    "attempts_total": 0,
    "retries_total": 0,
    "hosts_down": 0,
    "hosts_exhausted": 0,
}

class MetricsCollector:
    def __init__(self, app_id: str):
        self.app_id = app_id

        # Each collector owns its registry so several clients can live in one process
        self.registry = CollectorRegistry()

        self.request_count = Counter(
            'search_client_requests_total',
            'Total logical calls made by the search client',
            ['app_id', 'call_type', 'status'],
            registry=self.registry
        )

        self.request_duration = Histogram(
            'search_client_request_duration_seconds',
            'Logical call duration in seconds, all attempts included',
            ['app_id', 'call_type'],
            buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
            registry=self.registry
        )

        self.attempts_total = Counter(
            'search_client_attempts_total',
            'Network attempts per host and outcome',
            ['app_id', 'host', 'outcome'],
            registry=self.registry
        )

        self.host_up = Gauge(
            'search_client_host_up',
            'Host health as seen by the client (1=up, 0=down)',
            ['app_id', 'host'],
            registry=self.registry
        )

        self.exhausted_total = Counter(
            'search_client_hosts_exhausted_total',
            'Calls that failed because every host was tried',
            ['app_id', 'call_type'],
            registry=self.registry
        )

        # Plain counters for get_metrics()
        self._metrics: Dict[str, Any] = dict(BASE_METRICS)
        self._latencies: List[float] = []
        self._host_states: Dict[str, bool] = {}

    def record_request(self, call_type: str):
        """Record a logical call"""
        self._metrics["requests_total"] += 1

    def record_success(self, call_type: str, latency: float):
        """Record successful call"""
        self._metrics["requests_success"] += 1
        self._latencies.append(latency)
        # Keep only last 1000 latencies for percentile calculation
        if len(self._latencies) > 1000:
            self._latencies.pop(0)

        self.request_count.labels(
            app_id=self.app_id,
            call_type=call_type,
            status="success"
        ).inc()

        self.request_duration.labels(
            app_id=self.app_id,
            call_type=call_type
        ).observe(latency)

    def record_failure(self, call_type: str, latency: float):
        """Record failed call"""
        self._metrics["requests_failed"] += 1

        self.request_count.labels(
            app_id=self.app_id,
            call_type=call_type,
            status="failure"
        ).inc()

        self.request_duration.labels(
            app_id=self.app_id,
            call_type=call_type
        ).observe(latency)

    def record_attempt(self, host: str, outcome: str, host_up: bool):
        """Record one network attempt and the resulting host health"""
        self._metrics["attempts_total"] += 1
        if outcome == "retry":
            self._metrics["retries_total"] += 1

        self.attempts_total.labels(
            app_id=self.app_id,
            host=host,
            outcome=outcome
        ).inc()

        if not host_up and self._host_states.get(host, True):
            self._metrics["hosts_down"] += 1
        self._host_states[host] = host_up

        self.host_up.labels(
            app_id=self.app_id,
            host=host
        ).set(1 if host_up else 0)

    def record_exhausted(self, call_type: str):
        """Record a call that ran out of hosts"""
        self._metrics["hosts_exhausted"] += 1

        self.exhausted_total.labels(
            app_id=self.app_id,
            call_type=call_type
        ).inc()

    def get_metrics(self) -> Dict[str, Any]:
        """Get current metrics snapshot"""
        latencies = sorted(self._latencies)
        total_requests = self._metrics["requests_total"]

        metrics = self._metrics.copy()

        if latencies:
            metrics.update({
                "latency_p50": latencies[int(len(latencies) * 0.5)],
                "latency_p95": latencies[int(len(latencies) * 0.95)],
                "latency_p99": latencies[int(len(latencies) * 0.99)],
                "latency_avg": sum(latencies) / len(latencies),
            })

        if total_requests > 0:
            metrics.update({
                "success_rate": self._metrics["requests_success"] / total_requests,
                "error_rate": self._metrics["requests_failed"] / total_requests,
            })

        return metrics

    def get_prometheus_metrics(self) -> bytes:
        """Get metrics in Prometheus format"""
        return generate_latest(self.registry)

    def reset(self):
        """Reset the plain counters, Prometheus series are cumulative and kept"""
        self._metrics.clear()
        self._host_states.clear()
        self._latencies.clear()
        self._metrics.update(BASE_METRICS)
