"""In-process metrics registry with Prometheus text exposition.

The registry owns a handful of named counters and gauges and is the only
place that renders them. Default process samples (CPU, memory, file
descriptors, interpreter info, GC stats) come from ``prometheus_client``
collectors and are appended to the same export, carrying the same global
labels as the application metrics.
"""
from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from threading import Lock

from prometheus_client import CONTENT_TYPE_LATEST
from prometheus_client.gc_collector import GCCollector
from prometheus_client.platform_collector import PlatformCollector
from prometheus_client.process_collector import ProcessCollector
from prometheus_client.registry import Collector, CollectorRegistry
from prometheus_client.utils import floatToGoString

METRIC_NAME_PATTERN = re.compile(r"^[a-zA-Z_:][a-zA-Z0-9_:]*$")
LABEL_NAME_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

COUNTER = "counter"
GAUGE = "gauge"


class MetricError(Exception):
    pass


class DuplicateMetricError(MetricError):
    pass


class UnknownMetricError(MetricError, KeyError):
    pass


class MetricTypeError(MetricError, TypeError):
    pass


@dataclass
class Metric:
    name: str
    help: str
    type: str
    value: float = 0


def default_collectors() -> list[Collector]:
    # kept off the global REGISTRY; GCCollector rejects registry=None
    process_registry = CollectorRegistry()
    ProcessCollector(registry=process_registry)
    PlatformCollector(registry=process_registry)
    GCCollector(registry=process_registry)
    return [process_registry]


def _escape_help(text: str) -> str:
    return text.replace("\\", r"\\").replace("\n", r"\n")


def _escape_label_value(value: str) -> str:
    return value.replace("\\", r"\\").replace("\n", r"\n").replace('"', r"\"")


def _format_labels(labels: Mapping[str, str]) -> str:
    if not labels:
        return ""
    pairs = ",".join(
        f'{key}="{_escape_label_value(str(value))}"' for key, value in labels.items()
    )
    return "{" + pairs + "}"


def _format_value(value: float) -> str:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return floatToGoString(value)


class MetricsRegistry:
    content_type = CONTENT_TYPE_LATEST

    def __init__(
        self,
        global_labels: Mapping[str, str] | None = None,
        collectors: Iterable[Collector] | None = None,
    ) -> None:
        self._lock = Lock()
        self._metrics: dict[str, Metric] = {}
        self._global_labels = dict(global_labels or {})
        for label in self._global_labels:
            if not LABEL_NAME_PATTERN.match(label):
                raise ValueError(f"Invalid label name: {label!r}")
        self._collectors = list(collectors or [])

    @property
    def names(self) -> list[str]:
        with self._lock:
            return list(self._metrics)

    def register_counter(self, name: str, help: str) -> Metric:
        return self._register(Metric(name=name, help=help, type=COUNTER))

    def register_gauge(self, name: str, help: str) -> Metric:
        return self._register(Metric(name=name, help=help, type=GAUGE))

    def _register(self, metric: Metric) -> Metric:
        if not METRIC_NAME_PATTERN.match(metric.name):
            raise ValueError(f"Invalid metric name: {metric.name!r}")
        with self._lock:
            if metric.name in self._metrics:
                raise DuplicateMetricError(f"Metric already registered: {metric.name}")
            self._metrics[metric.name] = metric
        return metric

    def _get(self, name: str, expected_type: str | None = None) -> Metric:
        metric = self._metrics.get(name)
        if metric is None:
            raise UnknownMetricError(name)
        if expected_type is not None and metric.type != expected_type:
            raise MetricTypeError(f"{name} is a {metric.type}, not a {expected_type}")
        return metric

    @staticmethod
    def _check_amount(name: str, amount: int) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise ValueError(f"Counter {name} can only be incremented by integers")
        if amount < 0:
            raise ValueError(f"Counter {name} cannot be incremented by a negative amount")

    def increment_counter(self, name: str, amount: int = 1) -> None:
        self.increment_counters({name: amount})

    def increment_counters(self, amounts: Mapping[str, int]) -> None:
        """Apply several counter increments as one step.

        Every name and amount is validated before anything is written, so a
        bad entry leaves all counters untouched.
        """
        with self._lock:
            targets = []
            for name, amount in amounts.items():
                metric = self._get(name, COUNTER)
                self._check_amount(name, amount)
                targets.append((metric, amount))
            for metric, amount in targets:
                metric.value += amount

    def reset_counter(self, name: str) -> None:
        self.reset_counters([name])

    def reset_counters(self, names: Iterable[str]) -> None:
        with self._lock:
            targets = [self._get(name, COUNTER) for name in names]
            for metric in targets:
                metric.value = 0

    def set_gauge(self, name: str, value: float) -> None:
        with self._lock:
            self._get(name, GAUGE).value = value

    def get_value(self, name: str) -> float:
        with self._lock:
            return self._get(name).value

    def get_values(self, names: Iterable[str]) -> dict[str, float]:
        with self._lock:
            return {name: self._get(name).value for name in names}

    def export_text(self) -> str:
        with self._lock:
            snapshot = [
                Metric(name=m.name, help=m.help, type=m.type, value=m.value)
                for m in self._metrics.values()
            ]
        lines: list[str] = []
        labels = _format_labels(self._global_labels)
        for metric in snapshot:
            lines.append(f"# HELP {metric.name} {_escape_help(metric.help)}")
            lines.append(f"# TYPE {metric.name} {metric.type}")
            lines.append(f"{metric.name}{labels} {_format_value(metric.value)}")
        for collector in self._collectors:
            for family in collector.collect():
                lines.extend(self._format_family(family))
        return "\n".join(lines) + "\n"

    def _format_family(self, family) -> list[str]:
        name = family.name
        mtype = family.type
        if mtype == COUNTER:
            name = f"{name}_total"
        elif mtype == "info":
            name = f"{name}_info"
            mtype = GAUGE
        elif mtype == "unknown":
            mtype = "untyped"
        lines = [
            f"# HELP {name} {_escape_help(family.documentation)}",
            f"# TYPE {name} {mtype}",
        ]
        for sample in family.samples:
            labels = {**self._global_labels, **sample.labels}
            lines.append(
                f"{sample.name}{_format_labels(labels)} {_format_value(sample.value)}"
            )
        return lines
