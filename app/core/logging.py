import logging

from app.core.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s - %(message)s"


def setup_logging(level: str = LOG_LEVEL):
    """Configure the root logger once for the whole app."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # supabase/httpx are chatty at INFO (one line per request)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("hpack").setLevel(logging.WARNING)
