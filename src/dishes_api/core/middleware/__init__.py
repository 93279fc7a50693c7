"""Custom middleware components."""

from dishes_api.core.middleware.logging import LoggingMiddleware
from dishes_api.core.middleware.request_id import RequestIDMiddleware
from dishes_api.core.middleware.security_headers import SecurityHeadersMiddleware
from dishes_api.core.middleware.timing import TimingMiddleware


__all__ = [
    "LoggingMiddleware",
    "RequestIDMiddleware",
    "SecurityHeadersMiddleware",
    "TimingMiddleware",
]
