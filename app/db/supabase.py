import logging

from supabase import create_client
from app.core.config import SUPABASE_URL, SUPABASE_ANON_KEY, is_production

logger = logging.getLogger(__name__)

# PostgREST / Postgres codes for "no row", "no such function", "no such table"
NOT_FOUND_CODES = {"PGRST116", "PGRST202", "PGRST205", "42P01", "404"}
NOT_FOUND_HINTS = ("does not exist", "relation", "not found", "Could not find the table")

supabase = None
def get_client():
    global supabase
    if supabase is None:
        if not SUPABASE_URL or not SUPABASE_ANON_KEY:
            raise RuntimeError("Supabase URL/Key not configured. See .env")
        supabase = create_client(SUPABASE_URL, SUPABASE_ANON_KEY)
    return supabase


def error_code(error) -> str:
    code = getattr(error, "code", None)
    if code is None and isinstance(error, dict):
        code = error.get("code")
    return str(code) if code is not None else ""


def is_missing_relation(error) -> bool:
    """True for the errors PostgREST returns when a row, table or RPC is absent."""
    if error_code(error) in NOT_FOUND_CODES:
        return True
    message = getattr(error, "message", None) or str(error)
    details = getattr(error, "details", None) or ""
    hint = getattr(error, "hint", None) or ""
    text = " ".join(str(part) for part in (message, details, hint))
    return any(h in text for h in NOT_FOUND_HINTS)


def log_query_error(log: logging.Logger, what: str, error):
    """Log a failed query; missing tables/rows are debug-only and silent in production."""
    if is_missing_relation(error):
        if not is_production():
            log.debug("%s: %s (%s)", what, getattr(error, "message", error), error_code(error))
        return
    log.error("%s: %s (%s)", what, getattr(error, "message", error), error_code(error))


def first_row(res):
    """Data of a maybe_single()/single() response, which may itself be None."""
    if res is None:
        return None
    data = res.data
    if isinstance(data, list):
        return data[0] if data else None
    return data
