"""
Prometheus metrics endpoint.

Exposes request and login metrics for monitoring.
"""
from fastapi import APIRouter, Response
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

router = APIRouter()

# ============================================
# HTTP Request Metrics
# ============================================

http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# ============================================
# Auth Metrics
# ============================================

auth_logins_total = Counter(
    'auth_logins_total',
    'Completed logins',
    ['outcome']
)

auth_logouts_total = Counter(
    'auth_logouts_total',
    'Logout requests'
)

auth_redirects_total = Counter(
    'auth_redirects_total',
    'Requests turned away by an auth guard',
    ['guard']
)


# ============================================
# Metrics Helper Functions
# ============================================

def track_request(method: str, endpoint: str, status: int, duration_seconds: float):
    """
    Record HTTP request metrics.

    Call this after each request.
    """
    http_requests_total.labels(
        method=method,
        endpoint=endpoint,
        status=status
    ).inc()

    http_request_duration.labels(
        method=method,
        endpoint=endpoint
    ).observe(duration_seconds)


def track_login(outcome: str):
    """Record a login; outcome is "existing" or "created"."""
    auth_logins_total.labels(outcome=outcome).inc()


def track_logout():
    auth_logouts_total.inc()


def track_auth_redirect(guard: str):
    """Record a request rejected by a guard."""
    auth_redirects_total.labels(guard=guard).inc()


# ============================================
# Prometheus Endpoint
# ============================================

@router.get("/metrics")
async def metrics():
    """
    Prometheus metrics endpoint.

    Returns all registered metrics in Prometheus format.
    """
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
