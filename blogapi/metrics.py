import logging

from prometheus_client import Counter, Histogram, start_http_server

logger = logging.getLogger(__name__)

REQUESTS = Counter(
    'blogapi_requests_total',
    'HTTP requests handled',
    ['method', 'route', 'status'],
)
REQUEST_LATENCY = Histogram(
    'blogapi_request_duration_seconds',
    'HTTP request latency',
    ['method', 'route'],
)


def observe_request(method: str, route: str, status: int, duration: float):
    REQUESTS.labels(method=method, route=route, status=str(status)).inc()
    REQUEST_LATENCY.labels(method=method, route=route).observe(duration)


def init_metrics(port: int):
    """Initialize Prometheus metrics server"""
    try:
        start_http_server(port)
        logger.info(f'Prometheus metrics server started on port {port}')
    except OSError as e:
        logger.warning(f'Prometheus start failed: {e}')
