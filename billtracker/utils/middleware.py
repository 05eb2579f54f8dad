"""
Request middleware: rate limiting, security headers, request timing and
security audit events.
"""
from __future__ import annotations
import threading
import time
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from functools import wraps
from flask import Flask, request, jsonify, current_app, g

from .logging_utils import audit_logger, get_logger, performance_logger
from .security import generate_secure_token

logger = get_logger("middleware")


class RateLimiter:
    """In-memory sliding-window rate limiter keyed by client."""

    def __init__(self, max_requests: int = 100, window_seconds: int = 60):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._requests: Dict[str, list[float]] = {}
        self._lock = threading.Lock()
        self._last_sweep: Optional[float] = None

    def is_allowed(self, client_key: str, now: Optional[float] = None) -> tuple[bool, Dict[str, Any]]:
        now = time.time() if now is None else now
        cutoff_time = now - self.window_seconds

        with self._lock:
            if self._last_sweep is None or now - self._last_sweep >= self.window_seconds:
                self._sweep(cutoff_time)
                self._last_sweep = now
            # drop requests that slid out of the window
            hits = [t for t in self._requests.get(client_key, []) if t > cutoff_time]

            if len(hits) >= self.max_requests:
                self._requests[client_key] = hits
                retry_after = max(1, int(hits[0] + self.window_seconds - now) + 1)
                return False, {
                    'error': 'Too many requests',
                    'retry_after': retry_after,
                    'requests_in_window': len(hits),
                    'max_requests': self.max_requests
                }

            hits.append(now)
            self._requests[client_key] = hits

        return True, {
            'requests_in_window': len(hits),
            'max_requests': self.max_requests,
            'window_seconds': self.window_seconds,
            'reset_time': datetime.fromtimestamp(hits[0] + self.window_seconds, tz=timezone.utc).isoformat()
        }

    def _sweep(self, cutoff_time: float) -> None:
        # forget clients with no hits left in the window; caller holds the lock
        stale = [key for key, hits in self._requests.items() if not hits or hits[-1] <= cutoff_time]
        for key in stale:
            del self._requests[key]

    def reset(self) -> None:
        with self._lock:
            self._requests.clear()
            self._last_sweep = None


def client_key() -> str:
    """Identify the caller: CF-Connecting-IP, then the first X-Forwarded-For hop, then the socket peer."""
    ip = request.headers.get('CF-Connecting-IP')
    if not ip:
        forwarded = request.headers.get('X-Forwarded-For', '')
        ip = forwarded.split(',')[0].strip() if forwarded else None
    return f"ip_{ip or request.remote_addr or 'unknown'}"


def _too_many_requests(info: Dict[str, Any]):
    audit_logger.log_security_event(
        'rate_limit_exceeded',
        ip_address=request.remote_addr,
        description=f"{request.method} {request.path}",
        details={'max_requests': info.get('max_requests')},
    )
    response = jsonify({
        "error": info['error'],
        "code": "RATE_LIMIT_EXCEEDED",
        "retry_after": info['retry_after']
    })
    response.status_code = 429
    response.headers['Retry-After'] = str(info['retry_after'])
    return response


def _apply_rate_headers(response, info: Dict[str, Any]):
    response.headers['X-RateLimit-Limit'] = str(info['max_requests'])
    response.headers['X-RateLimit-Remaining'] = str(max(0, info['max_requests'] - info['requests_in_window']))
    response.headers['X-RateLimit-Reset'] = info['reset_time']
    return response


def rate_limit(limiter_name: str = 'auth'):
    """Apply the named limiter registered on the app to a single view."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_app.config.get('ENABLE_RATE_LIMITING', True):
                return f(*args, **kwargs)
            limiter: RateLimiter = current_app.extensions['rate_limiters'][limiter_name]
            allowed, info = limiter.is_allowed(f"{limiter_name}:{client_key()}")
            if not allowed:
                return _too_many_requests(info)
            return f(*args, **kwargs)
        return decorated_function
    return decorator


SECURITY_HEADERS = {
    'Content-Security-Policy': "default-src 'self'; script-src 'self'; style-src 'self'; img-src 'self' data:; font-src 'self'; connect-src 'self'",
    'X-Content-Type-Options': 'nosniff',
    'X-Frame-Options': 'DENY',
    'X-XSS-Protection': '1; mode=block',
    'Referrer-Policy': 'strict-origin-when-cross-origin',
    'Permissions-Policy': 'camera=self, microphone=self, geolocation=self',
}

# flasgger's UI pulls scripts and styles from a CDN
DOCS_PREFIXES = ('/apidocs', '/flasgger_static', '/apispec')


def add_security_headers(response):
    for header, value in SECURITY_HEADERS.items():
        if header == 'Content-Security-Policy' and request.path.startswith(DOCS_PREFIXES):
            continue
        response.headers[header] = value
    return response


def init_middleware(app: Flask) -> None:
    """Register the global limiter, timing and header hooks on ``app``."""
    app.extensions['rate_limiters'] = {
        'default': RateLimiter(
            max_requests=app.config['RATE_LIMIT_MAX_REQUESTS'],
            window_seconds=app.config['RATE_LIMIT_WINDOW_SECONDS'],
        ),
        'auth': RateLimiter(
            max_requests=app.config['AUTH_RATE_LIMIT_MAX_REQUESTS'],
            window_seconds=app.config['RATE_LIMIT_WINDOW_SECONDS'],
        ),
    }

    @app.before_request
    def _start_request():
        g.request_started = time.perf_counter()
        g.request_id = (request.headers.get('X-Request-ID') or generate_secure_token(8))[:64]
        if request.method == 'OPTIONS' or not request.path.startswith('/api/'):
            return None
        if not app.config.get('ENABLE_RATE_LIMITING', True):
            return None
        allowed, info = app.extensions['rate_limiters']['default'].is_allowed(client_key())
        if not allowed:
            return _too_many_requests(info)
        g.rate_limit_info = info
        return None

    @app.after_request
    def _finish_request(response):
        info = g.get('rate_limit_info')
        if info:
            _apply_rate_headers(response, info)
        add_security_headers(response)
        response.headers.setdefault('X-Request-ID', g.get('request_id', ''))
        started = g.get('request_started')
        if started is not None and request.path.startswith('/api/'):
            performance_logger.log_request_timing(
                request.path,
                request.method,
                (time.perf_counter() - started) * 1000,
                response.status_code,
            )
        return response


def _status_for(exc: Exception) -> int:
    from pydantic import ValidationError
    from werkzeug.exceptions import HTTPException
    from ..errors import BillTrackerError

    if isinstance(exc, BillTrackerError):
        return exc.status_code
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, HTTPException):
        return exc.code or 500
    return 500


def audit_security_event(event_type: str):
    """Record a security audit entry after the wrapped view runs, whether it returns or raises."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            from ..extensions import db

            start_time = time.time()
            try:
                response = f(*args, **kwargs)
            except Exception as exc:
                db.session.rollback()
                _record_outcome(event_type, f.__name__, _status_for(exc), start_time)
                raise
            status = response[1] if isinstance(response, tuple) else getattr(response, 'status_code', 200)
            _record_outcome(event_type, f.__name__, status, start_time)
            return response
        return decorated_function
    return decorator


def _record_outcome(event_type: str, function: str, status: int, start_time: float) -> None:
    record_security_event(
        event_type,
        {
            'function': function,
            'success': status < 400,
            'status': status,
            'duration_ms': int((time.time() - start_time) * 1000)
        },
        user_id=g.get('audit_user_id'),
    )


def record_security_event(event_type: str, details: Dict[str, Any], user_id: Optional[str] = None) -> None:
    """Log a security event and persist it to the audit_logs table."""
    from ..extensions import db
    from ..models import AuditLog

    if details.get('success', True):
        logger.info("Security event %s: %s", event_type, details)
    else:
        audit_logger.log_security_event(
            event_type, user_id=user_id, ip_address=request.remote_addr, details=details
        )

    try:
        db.session.add(AuditLog(
            user_id=user_id,
            action=f'security_{event_type}',
            target_type='security',
            target_id=user_id,
            ip=request.remote_addr,
            user_agent=request.headers.get('User-Agent'),
            payload=details,
        ))
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"Failed to log security event to database: {e}")
