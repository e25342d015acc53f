# Middleware package for the FitClub API

from .request_id import RequestIDMiddleware
from .rate_limit import limiter, rate_limit_checkin, rate_limit_activity_write, rate_limit_api_read, rate_limit_admin

__all__ = [
    "RequestIDMiddleware",
    "limiter",
    "rate_limit_checkin",
    "rate_limit_activity_write",
    "rate_limit_api_read",
    "rate_limit_admin",
]
