"""Process metrics for the health endpoint."""

from __future__ import annotations

import psutil
from prometheus_client import Gauge


process_memory_rss = Gauge("process_memory_rss_bytes", "Resident memory of the web process")


class PerformanceMonitor:
    def __init__(self) -> None:
        self.process = psutil.Process()

    def gather_host_metrics(self) -> dict:
        memory_info = self.process.memory_info()
        process_memory_rss.set(memory_info.rss)
        return {
            "memory_rss": memory_info.rss,
            "cpu_percent": self.process.cpu_percent(interval=None),
            "threads": self.process.num_threads(),
        }
