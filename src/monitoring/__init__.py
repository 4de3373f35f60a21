"""
Monitoring module for Prometheus metrics.
"""
from .prometheus import (
    http_requests_total,
    http_request_duration,
    attendance_events_total,
    slack_commands_total,
    slack_messages_sent,
    db_pool_connections,
    errors_total,
    update_db_pool_metrics,
    record_attendance_event,
)

from .middleware import metrics_middleware

__all__ = [
    'http_requests_total',
    'http_request_duration',
    'attendance_events_total',
    'slack_commands_total',
    'slack_messages_sent',
    'db_pool_connections',
    'errors_total',
    'update_db_pool_metrics',
    'record_attendance_event',
    'metrics_middleware',
]
