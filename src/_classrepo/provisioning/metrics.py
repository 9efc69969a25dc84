"""Timing and counter metrics for provisioning, exported with
prometheus_client.

Metrics are addressed by dotted names (e.g. ``repo.create.success``). Each
name maps to one Prometheus collector, created on first use: a dotted name
``a.b.c`` becomes ``<namespace>_a_b_c``.

.. module:: metrics
    :synopsis: Prometheus-backed timing and counter metrics.
"""
import threading
from typing import Dict, Optional

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram

# milliseconds, repository creation typically takes a few seconds
TIMING_BUCKETS = (
    100.0,
    250.0,
    500.0,
    1000.0,
    2500.0,
    5000.0,
    10000.0,
    30000.0,
    60000.0,
    float("inf"),
)


class StatsRecorder:
    """Records timings and counts into a Prometheus registry."""

    def __init__(
        self,
        registry: Optional[CollectorRegistry] = None,
        namespace: str = "classrepo",
    ):
        """
        Args:
            registry: Registry to register collectors in. Defaults to the
                global Prometheus registry.
            namespace: Prefix of all metric names.
        """
        self._registry = registry if registry is not None else REGISTRY
        self._namespace = namespace
        self._counters: Dict[str, Counter] = {}
        self._histograms: Dict[str, Histogram] = {}
        self._lock = threading.Lock()

    def timing(self, name: str, milliseconds: float) -> None:
        """Record a timing sample.

        Args:
            name: Dotted name of the metric.
            milliseconds: The sampled duration.
        """
        with self._lock:
            histogram = self._histograms.get(name)
            if histogram is None:
                histogram = Histogram(
                    self.metric_name(name),
                    f"Duration of {name} in milliseconds",
                    buckets=TIMING_BUCKETS,
                    registry=self._registry,
                )
                self._histograms[name] = histogram
        histogram.observe(milliseconds)

    def increment(self, name: str) -> None:
        """Increment a counter by one.

        Args:
            name: Dotted name of the metric.
        """
        with self._lock:
            counter = self._counters.get(name)
            if counter is None:
                counter = Counter(
                    self.metric_name(name),
                    f"Number of {name} events",
                    registry=self._registry,
                )
                self._counters[name] = counter
        counter.inc()

    def metric_name(self, name: str) -> str:
        """The Prometheus name of a dotted metric name, without any suffix
        added by Prometheus (such as ``_total`` for counters).
        """
        return "{}_{}".format(self._namespace, name.replace(".", "_"))
