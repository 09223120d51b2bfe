"""Replay the ledger and report accounts whose stored balance has drifted."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from ..models import Account, LedgerEntry
from .ledger import replay_account

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BalanceMismatch:
    account_id: int
    code: str
    stored: Decimal
    replayed: Decimal
    # running_balance of the account's latest ledger row, if any
    last_running: Optional[Decimal]

    def as_dict(self):
        return {
            "account_id": self.account_id,
            "code": self.code,
            "stored": str(self.stored),
            "replayed": str(self.replayed),
            "last_running": None if self.last_running is None else str(self.last_running),
        }


def check_account(account) -> Optional[BalanceMismatch]:
    replayed = replay_account(account)
    last = LedgerEntry.objects.for_account(account).last()
    last_running = last.running_balance if last is not None else None
    consistent = replayed == account.current_balance and (
        last_running is None or last_running == replayed
    )
    if consistent:
        return None
    return BalanceMismatch(
        account_id=account.pk,
        code=account.code,
        stored=account.current_balance,
        replayed=replayed,
        last_running=last_running,
    )


def verify_ledger(codes=None) -> List[BalanceMismatch]:
    accounts = Account.objects.all()
    if codes:
        accounts = accounts.filter(code__in=codes)

    mismatches = []
    for account in accounts.order_by("pk"):
        mismatch = check_account(account)
        if mismatch is not None:
            logger.error(
                "Ledger mismatch on account %s: stored=%s replayed=%s",
                account.code, mismatch.stored, mismatch.replayed,
                extra=mismatch.as_dict(),
            )
            mismatches.append(mismatch)
    return mismatches
