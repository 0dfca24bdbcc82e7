from prometheus_client import Counter, Histogram, start_http_server, CollectorRegistry
import threading


class MetricsCollector:
    """
    Prometheus metrics of one TupleMR worker engine.
    Each instance owns its CollectorRegistry so several engines can live in one process.
    """
    def __init__(self, port: int = 0):
        self.registry = CollectorRegistry()
        self.tasks_completed = Counter('worker_tasks_completed', 'Tasks completed by the worker', registry=self.registry)
        self.tasks_failed = Counter('worker_tasks_failed', 'Tasks whose function raised', registry=self.registry)
        self.task_duration = Histogram('worker_task_duration_seconds', 'Task execution time in seconds', registry=self.registry)
        self._port = port
        self._server_thread = None

    def start_server(self):
        """Start the Prometheus HTTP exporter in the background (once, and only if a port is set)."""
        if self._port and self._server_thread is None:
            self._server_thread = threading.Thread(target=start_http_server, args=(self._port,), kwargs={"registry": self.registry}, daemon=True)
            self._server_thread.start()

    def increment_counter(self, name: str):
        if name == "tasks_completed":
            self.tasks_completed.inc()
        elif name == "tasks_failed":
            self.tasks_failed.inc()

    def get_counter(self, name: str) -> int:
        """Current value of a counter."""
        if name == "tasks_completed":
            return int(self.registry.get_sample_value('worker_tasks_completed_total') or 0)
        elif name == "tasks_failed":
            return int(self.registry.get_sample_value('worker_tasks_failed_total') or 0)
        return 0

    def observe_histogram(self, name: str, value: float):
        if name == "task_duration":
            self.task_duration.observe(value)
