"""
Re-run an operation that lost a balance race.

Only SerializationConflict is retried: it means the whole atomic block was
rolled back and running it again with the same input is safe. Validation and
state errors are permanent and propagate on the first attempt.
"""

import functools
import logging

from django.conf import settings
from django.db import transaction

from ..exceptions import SerializationConflict

logger = logging.getLogger(__name__)


def retry_on_conflict(func=None, *, attempts=None):
    """
    Decorator (bare or with arguments):

        @retry_on_conflict
        def post(...): ...

        @retry_on_conflict(attempts=5)
        def pay(...): ...

    Only retries at the outermost transaction.atomic(). Called inside an
    outer transaction (including ATOMIC_REQUESTS) the conflict propagates on
    the first attempt so the caller that owns the transaction can roll back.
    """

    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            if transaction.get_connection().in_atomic_block:
                return fn(*args, **kwargs)

            max_attempts = attempts or settings.LEDGER_POSTING_RETRIES
            for attempt in range(1, max_attempts + 1):
                try:
                    return fn(*args, **kwargs)
                except SerializationConflict:
                    if attempt >= max_attempts:
                        logger.error(
                            "%s gave up after %d conflicting attempts",
                            fn.__name__, attempt,
                        )
                        raise
                    logger.warning(
                        "%s hit a serialization conflict, retrying (%d/%d)",
                        fn.__name__, attempt, max_attempts,
                    )

        return wrapper

    if func is not None:
        return decorator(func)
    return decorator
