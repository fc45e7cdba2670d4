#!/usr/bin/env python3
"""
Monitoring and Logging for the Maze Path Validator
"""

import logging
import logging.handlers
import os
import json
import time
import threading
from datetime import datetime, timedelta, timezone
from functools import wraps

from flask import request, g, jsonify


class MazeLogger:
    def __init__(self, name='maze_validator'):
        self.log_dir = None
        self.logger = logging.getLogger(name)
        self.security_logger = logging.getLogger(f'{name}.security')
        self.configured = False

    def setup_logging(self, log_dir=None, log_level='INFO'):
        """Attach console and, when log_dir is set, rotating file handlers"""
        self.log_dir = log_dir
        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

        # Clear handlers from a previous configuration
        for handler in list(root_logger.handlers):
            if getattr(handler, '_maze_handler', False):
                root_logger.removeHandler(handler)
                handler.close()

        detailed_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        access_formatter = logging.Formatter(
            '%(asctime)s - %(message)s'
        )

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(detailed_formatter)
        handlers = [console_handler]

        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

            access_handler = logging.handlers.RotatingFileHandler(
                os.path.join(log_dir, 'access.log'),
                maxBytes=10*1024*1024,  # 10MB
                backupCount=5
            )
            access_handler.setLevel(logging.INFO)
            access_handler.setFormatter(access_formatter)

            error_handler = logging.handlers.RotatingFileHandler(
                os.path.join(log_dir, 'error.log'),
                maxBytes=5*1024*1024,   # 5MB
                backupCount=5
            )
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(detailed_formatter)

            handlers.extend([access_handler, error_handler])

        for handler in handlers:
            handler._maze_handler = True
            root_logger.addHandler(handler)

        self.configured = True

    def _client_ip(self):
        try:
            return getattr(g, 'client_ip', 'unknown')
        except RuntimeError:
            # Outside of a request context
            return 'local'

    def log_request(self, endpoint, method, status_code, response_time, ip=None, user_agent=None):
        """Log HTTP request"""
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'method': method,
            'endpoint': endpoint,
            'status_code': status_code,
            'response_time_ms': round(response_time * 1000, 2),
            'ip': ip or self._client_ip(),
            'user_agent': user_agent or 'unknown'
        }

        self.logger.info(f"ACCESS: {json.dumps(log_data)}")

    def log_session_event(self, event_type, data, session_id=None):
        """Log session lifecycle and solve events"""
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'event_type': event_type,
            'session_id': session_id,
            'data': data
        }

        if event_type in ['session_busy', 'session_not_found']:
            self.security_logger.warning(f"SESSION: {json.dumps(log_data)}")
        else:
            self.logger.info(f"SESSION: {json.dumps(log_data)}")

    def log_error(self, error, context=None):
        """Log errors with context"""
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'error': str(error),
            'type': type(error).__name__,
            'context': context or {},
            'ip': self._client_ip()
        }

        self.logger.error(f"ERROR: {json.dumps(log_data, default=str)}")

    def log_performance(self, operation, duration, details=None):
        """Log performance metrics"""
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'operation': operation,
            'duration_ms': round(duration * 1000, 2),
            'details': details or {}
        }

        self.logger.info(f"PERFORMANCE: {json.dumps(log_data)}")


class PerformanceMonitor:
    def __init__(self, logger, slow_threshold=1.0):
        self.logger = logger
        self.slow_threshold = slow_threshold
        self.metrics = {}
        self.lock = threading.Lock()

    def time_operation(self, operation_name):
        """Decorator to time operations"""
        def decorator(func):
            @wraps(func)
            def wrapper(*args, **kwargs):
                start_time = time.perf_counter()
                success = True
                error = None
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    success = False
                    error = str(e)
                    raise
                finally:
                    duration = time.perf_counter() - start_time
                    self.record_metric(operation_name, duration, success, error)
            return wrapper
        return decorator

    def record_metric(self, operation, duration, success=True, error=None):
        """Record performance metric"""
        with self.lock:
            if operation not in self.metrics:
                self.metrics[operation] = {
                    'count': 0,
                    'total_duration': 0,
                    'success_count': 0,
                    'error_count': 0,
                    'min_duration': float('inf'),
                    'max_duration': 0,
                    'errors': []
                }

            metric = self.metrics[operation]
            metric['count'] += 1
            metric['total_duration'] += duration
            metric['min_duration'] = min(metric['min_duration'], duration)
            metric['max_duration'] = max(metric['max_duration'], duration)

            if success:
                metric['success_count'] += 1
            else:
                metric['error_count'] += 1
                if error and len(metric['errors']) < 10:
                    metric['errors'].append(error)

            avg_duration = metric['total_duration'] / metric['count']

        if duration > self.slow_threshold:
            self.logger.log_performance(operation, duration, {
                'success': success,
                'avg_duration': avg_duration
            })

    def get_metrics(self):
        """Get all performance metrics"""
        with self.lock:
            result = {}
            for operation, metric in self.metrics.items():
                if metric['count'] > 0:
                    result[operation] = {
                        'count': metric['count'],
                        'avg_duration_ms': round(metric['total_duration'] / metric['count'] * 1000, 3),
                        'min_duration_ms': round(metric['min_duration'] * 1000, 3),
                        'max_duration_ms': round(metric['max_duration'] * 1000, 3),
                        'success_rate': round(metric['success_count'] / metric['count'] * 100, 2),
                        'error_count': metric['error_count'],
                        'recent_errors': metric['errors'][-5:] if metric['errors'] else []
                    }
            return result

    def reset(self):
        with self.lock:
            self.metrics.clear()


class HealthMonitor:
    def __init__(self, session_store, monitor=None):
        self.session_store = session_store
        self.performance_monitor = monitor if monitor is not None else performance_monitor
        self.start_time = time.time()

    def get_issues(self):
        """Operations that have failed since the metrics were last reset"""
        metrics = self.performance_monitor.get_metrics()
        return [
            f"{operation}: {metric['error_count']} error(s)"
            for operation, metric in sorted(metrics.items())
            if metric['error_count'] > 0
        ]

    def get_system_health(self):
        """Get overall system health"""
        uptime = time.time() - self.start_time
        issues = self.get_issues()

        return {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'uptime_seconds': round(uptime, 2),
            'uptime_formatted': str(timedelta(seconds=int(uptime))),
            'sessions': self.session_store.stats(),
            'issues': issues,
            'overall_status': 'degraded' if issues else 'healthy'
        }


# Global instances
maze_logger = MazeLogger()
performance_monitor = PerformanceMonitor(maze_logger)


def setup_monitoring(app, session_store):
    """Setup monitoring for Flask app"""
    health_monitor = HealthMonitor(session_store, performance_monitor)

    @app.before_request
    def before_request():
        g.start_time = time.perf_counter()
        g.client_ip = request.environ.get('HTTP_X_FORWARDED_FOR', request.remote_addr)

    @app.after_request
    def after_request(response):
        if hasattr(g, 'start_time'):
            response_time = time.perf_counter() - g.start_time
            maze_logger.log_request(
                request.endpoint,
                request.method,
                response.status_code,
                response_time,
                g.client_ip,
                request.headers.get('User-Agent')
            )
        return response

    @app.route('/admin/health')
    def health_check():
        """System health check endpoint"""
        return jsonify(health_monitor.get_system_health())

    @app.route('/admin/metrics')
    def get_metrics():
        """Performance metrics endpoint"""
        return jsonify(performance_monitor.get_metrics())

    return health_monitor


# Monitoring decorators
def monitor_maze_generation(func):
    """Monitor maze generation performance"""
    return performance_monitor.time_operation('maze_generation')(func)


def monitor_solve(func):
    """Monitor path solver performance"""
    return performance_monitor.time_operation('path_solve')(func)
