"""
Prometheus metrics for monitoring.
"""
from prometheus_client import Counter, Histogram, Gauge, Info
import logging

logger = logging.getLogger(__name__)

# HTTP Metrics
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration',
    ['method', 'endpoint']
)

# Attendance Metrics
attendance_events_total = Counter(
    'attendance_events_total',
    'Attendance state transitions attempted',
    ['event', 'outcome']  # check_in/check_out, success/<error class>
)

# Slack Metrics
slack_commands_total = Counter(
    'slack_commands_total',
    'Slack slash commands handled',
    ['command', 'outcome']
)

slack_messages_sent = Counter(
    'slack_messages_sent_total',
    'Slack webhook messages sent',
    ['source', 'status']
)

# Database Metrics
db_pool_connections = Gauge(
    'db_pool_connections',
    'Database pool connections',
    ['state']  # checked_in, checked_out, overflow
)

# Error Metrics
errors_total = Counter(
    'errors_total',
    'Total errors',
    ['type', 'severity']
)

# System Info
app_info = Info('app', 'Application information')
app_info.info({
    'name': 'teamcollab-backend',
    'version': '1.0.0'
})


def update_db_pool_metrics(pool_status: dict):
    """Update database pool gauges from Database.get_pool_status()."""
    for state in ('checked_in', 'checked_out', 'overflow'):
        if state in pool_status:
            db_pool_connections.labels(state=state).set(pool_status[state])


def record_attendance_event(event: str, outcome: str = "success"):
    """Count one attendance transition attempt."""
    try:
        attendance_events_total.labels(event=event, outcome=outcome).inc()
    except Exception as e:
        logger.warning(f"Failed to record attendance metric: {e}")
