import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task  # register this function as a Celery task
def verify_ledger_balances(codes=None):
    """
    Replay every account's ledger rows and compare with current_balance.
    Read-only; returns the mismatches as plain dicts for the result backend.
    """
    # import lazily to avoid circular imports at module import time
    from .services.verify import verify_ledger

    mismatches = verify_ledger(codes=codes)
    if mismatches:
        logger.error("Ledger verification found %d mismatched accounts", len(mismatches))
    else:
        logger.info("Ledger verification passed")
    return [m.as_dict() for m in mismatches]
