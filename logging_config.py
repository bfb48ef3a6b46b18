import logging
import sys
from contextvars import ContextVar

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] [%(request_id)s] %(message)s"

# Set per request by the middleware in main.py
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


class RequestIdFilter(logging.Filter):
    """Logging filter to add the current request id to log records."""

    def filter(self, record):
        record.request_id = request_id_var.get()
        return True


class SafeFormatter(logging.Formatter):
    """Formatter that ensures request_id always exists."""

    def format(self, record):
        if not hasattr(record, "request_id"):
            record.request_id = "-"
        return super().format(record)


def setup_logging(level: str = "INFO"):
    root = logging.getLogger()
    root.setLevel(logging.WARNING)

    # Idempotent, the app factory may run more than once (tests)
    for handler in list(root.handlers):
        if getattr(handler, "_storefront", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(SafeFormatter(LOG_FORMAT))
    handler.addFilter(RequestIdFilter())
    handler._storefront = True
    root.addHandler(handler)

    logging.getLogger("storefront").setLevel(getattr(logging, level.upper(), logging.INFO))
    return root
