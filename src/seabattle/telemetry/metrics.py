"""Counters and histograms for game-level measurements."""

from __future__ import annotations

from typing import TYPE_CHECKING, Mapping

from opentelemetry import metrics as otel_metrics
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.metrics import Counter, Histogram, Meter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource

if TYPE_CHECKING:  # pragma: no cover
    from .config import TelemetryConfig

MetricAttributes = Mapping[str, str | bool | int | float]

_METER_PROVIDER: MeterProvider | None = None
_METER: Meter | None = None
_INSTRUMENTS: dict[str, Counter] = {}
_HISTOGRAMS: dict[str, Histogram] = {}


def get_meter(name: str = "seabattle") -> Meter:
    global _METER
    if _METER is None:
        _METER = otel_metrics.get_meter(name)
    return _METER


def init_metrics(config: TelemetryConfig, export_interval_millis: int = 5000) -> Meter:
    """Install a MeterProvider; readers are only attached when an endpoint is set."""
    global _METER_PROVIDER, _METER, _INSTRUMENTS, _HISTOGRAMS

    readers = []
    if config.otlp_metrics_endpoint:
        readers.append(
            PeriodicExportingMetricReader(
                OTLPMetricExporter(endpoint=config.otlp_metrics_endpoint, insecure=True),
                export_interval_millis=export_interval_millis,
            )
        )

    _METER_PROVIDER = MeterProvider(
        resource=Resource.create(config.resource()), metric_readers=readers
    )
    otel_metrics.set_meter_provider(_METER_PROVIDER)
    _METER = _METER_PROVIDER.get_meter(config.service_name)
    # Instruments bound to the previous meter would no longer export.
    _INSTRUMENTS = {}
    _HISTOGRAMS = {}
    return _METER


def record_game_metric(name: str, value: float, attrs: MetricAttributes | None = None) -> None:
    """Add ``value`` to the counter called ``name``, creating it on first use."""
    instrument = _INSTRUMENTS.get(name)
    if instrument is None:
        instrument = get_meter().create_counter(name)
        _INSTRUMENTS[name] = instrument
    instrument.add(value, attributes=attrs or {})


def record_game_histogram(
    name: str, value: float, attrs: MetricAttributes | None = None, unit: str = ""
) -> None:
    """Record one sample of a distribution such as game length or duration."""
    histogram = _HISTOGRAMS.get(name)
    if histogram is None:
        histogram = get_meter().create_histogram(name, unit=unit)
        _HISTOGRAMS[name] = histogram
    histogram.record(value, attributes=attrs or {})


def shutdown_metrics() -> None:
    """Export outstanding measurements and stop the provider."""
    global _METER_PROVIDER, _METER
    if _METER_PROVIDER is None:
        return
    _METER_PROVIDER.shutdown()
    _METER_PROVIDER = None
    _METER = None
    _INSTRUMENTS.clear()
    _HISTOGRAMS.clear()
