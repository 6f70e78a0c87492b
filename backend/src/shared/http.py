"""
API Gateway boundary for Lambda handlers.

api_handler resolves the caller once, makes sure they have a ledger row and
maps business errors to HTTP responses, so handlers only deal with the happy
path.
"""
import functools

from .app import get_services
from .auth import resolve_identity
from .errors import RewardsError
from .logging import logger, log_event
from .utils import format_response


def api_handler(authenticated: bool = True):
    """
    Decorate a Lambda handler.

    Authenticated handlers are called as func(event, identity, services);
    unauthenticated ones as func(event, services). Either returns a
    format_response() dict.
    """
    def decorator(func):
        @functools.wraps(func)
        def handler(event, context):
            log_event(event)
            try:
                services = get_services()
                if not authenticated:
                    return func(event, services)
                identity = resolve_identity(event)
                services.ledger.ensure(identity)
                return func(event, identity, services)
            except RewardsError as e:
                logger.warning(f"{func.__module__}: {e.status_code} {e}")
                return format_response(e.status_code, e.to_body())
            except Exception:
                logger.exception(f"Unhandled error in {func.__module__}")
                return format_response(500, {'error': 'Internal Server Error'})
        return handler
    return decorator
