"""
Prometheus metrics blueprint.

Exposes /metrics with HTTP request metrics and order placement outcomes.
Not authenticated: keep it on the internal network.
"""
import os
import time
from contextlib import contextmanager

from flask import Blueprint, Response, request, g
from prometheus_client import (
    Counter, Histogram, Gauge, CollectorRegistry, REGISTRY, CONTENT_TYPE_LATEST,
    generate_latest, multiprocess
)

from app.exceptions import BusinessLogicError, OrderUnavailableError

metrics_bp = Blueprint('metrics', __name__)

# Gunicorn workers write to PROMETHEUS_MULTIPROC_DIR and are aggregated on scrape
MULTIPROCESS_MODE = os.environ.get('PROMETHEUS_MULTIPROC_DIR') is not None

if MULTIPROCESS_MODE:
    registry = CollectorRegistry()
    multiprocess.MultiProcessCollector(registry)
    _metric_registry = None
else:
    registry = REGISTRY
    _metric_registry = registry

http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'http_status'],
    registry=_metric_registry
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request latency in seconds',
    ['method', 'endpoint'],
    registry=_metric_registry,
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)

http_requests_in_flight = Gauge(
    'http_requests_in_flight',
    'HTTP requests currently being processed',
    registry=_metric_registry,
    multiprocess_mode='livesum'
)

orders_placed_total = Counter(
    'orders_placed_total',
    'Order placement attempts by outcome (placed, unavailable, failed)',
    ['outcome'],
    registry=_metric_registry
)

order_placement_duration_seconds = Histogram(
    'order_placement_duration_seconds',
    'Time spent in the stock reservation transaction, lock waits included',
    registry=_metric_registry,
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)
)


@contextmanager
def track_order_placement():
    """Time one placement attempt and count its outcome."""
    start = time.perf_counter()
    try:
        yield
    except OrderUnavailableError:
        orders_placed_total.labels(outcome='unavailable').inc()
        raise
    except BusinessLogicError:
        # Malformed request, nothing was attempted
        raise
    except Exception:
        orders_placed_total.labels(outcome='failed').inc()
        raise
    else:
        orders_placed_total.labels(outcome='placed').inc()
    finally:
        order_placement_duration_seconds.observe(time.perf_counter() - start)


def setup_metrics_instrumentation(app):
    """Register request hooks that feed the HTTP metrics. Called from the factory."""

    @app.before_request
    def before_request_metrics():
        g._prometheus_metrics_start_time = time.perf_counter()
        g._prometheus_in_flight = True
        http_requests_in_flight.inc()

    @app.after_request
    def after_request_metrics(response):
        start = g.pop('_prometheus_metrics_start_time', None)
        if start is None:
            return response
        # Scrapes would otherwise dominate the request counters
        endpoint = request.endpoint or 'unknown'
        if endpoint == 'metrics.metrics':
            return response
        try:
            http_request_duration_seconds.labels(
                method=request.method,
                endpoint=endpoint
            ).observe(time.perf_counter() - start)
            http_requests_total.labels(
                method=request.method,
                endpoint=endpoint,
                http_status=response.status_code
            ).inc()
        except Exception as e:
            app.logger.warning(f"Failed to record metrics: {e}")
        return response

    @app.teardown_request
    def teardown_request_metrics(exception=None):
        if g.pop('_prometheus_in_flight', False):
            http_requests_in_flight.dec()


@metrics_bp.route('/metrics')
def metrics():
    """Prometheus scrape endpoint."""
    return Response(generate_latest(registry), mimetype=CONTENT_TYPE_LATEST)
