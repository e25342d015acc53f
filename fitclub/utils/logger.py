import logging
import contextvars

# Request ID and authenticated member for the current request, across awaits
request_id_context = contextvars.ContextVar('request_id', default=None)
user_id_context = contextvars.ContextVar('user_id', default=None)


class RequestAwareLogger:
    """
    Logger wrapper that stamps every record with the current request ID and
    member ID, so a check-in or streak update can be traced back to the
    request and user that caused it.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)
        self.name = name

    def _log_with_context(self, level: int, msg: str, *args, **kwargs):
        request_id = kwargs.pop('request_id', None) or request_id_context.get()
        user_id = kwargs.pop('user_id', None) or user_id_context.get()

        extra = kwargs.get('extra', {})
        if request_id:
            extra['request_id'] = request_id
        if user_id:
            extra['user_id'] = user_id
        if extra:
            kwargs['extra'] = extra

        self.logger.log(level, msg, *args, **kwargs)

    def debug(self, msg: str, *args, **kwargs):
        self._log_with_context(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        self._log_with_context(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        self._log_with_context(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        self._log_with_context(logging.ERROR, msg, *args, **kwargs)

    def critical(self, msg: str, *args, **kwargs):
        self._log_with_context(logging.CRITICAL, msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs):
        self._log_with_context(logging.ERROR, msg, *args, **kwargs, exc_info=True)


def get_logger(name: str) -> RequestAwareLogger:
    """
    Get a request-aware logger for the specified name.

    Args:
        name: Logger name (usually __name__)
    """
    return RequestAwareLogger(name)


def set_request_context(request_id: str):
    request_id_context.set(request_id)


def set_user_context(user_id: str):
    """Attach the authenticated member to log records for the rest of the request."""
    user_id_context.set(user_id)


def clear_request_context():
    request_id_context.set(None)
    user_id_context.set(None)
