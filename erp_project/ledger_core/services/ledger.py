"""
Ledger Poster.

Applies a balanced draft JournalEntry to the ledger:

- the entry row and every touched Account row are locked
  (accounts in ascending id order)
- each journal line appends one LedgerEntry carrying the account's new
  running balance
- each balance write is a conditional UPDATE on the version read under the
  lock; a stale version means someone changed the row underneath us and the
  whole transaction is abandoned with SerializationConflict

Either every line lands or none does.
"""

import logging
from contextlib import contextmanager
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.db.models import F
from django.utils import timezone

from ..exceptions import NotFoundError, SerializationConflict
from ..models import Account, JournalEntry, LedgerEntry
from .journal import assert_balanced
from .periods import resolve_open_period

logger = logging.getLogger(__name__)

# SQLSTATE serialization_failure / deadlock_detected
CONFLICT_SQLSTATES = {"40001", "40P01"}


def _sqlstate(exc):
    cause = exc.__cause__
    return getattr(cause, "pgcode", None) or getattr(cause, "sqlstate", None)


@contextmanager
def translate_conflicts():
    """Re-raise database serialization failures and deadlocks as SerializationConflict."""
    try:
        yield
    except DatabaseError as exc:
        if _sqlstate(exc) in CONFLICT_SQLSTATES:
            raise SerializationConflict(str(exc)) from exc
        raise


def _write_balance(account, new_balance):
    updated = Account.objects.filter(pk=account.pk, version=account.version).update(
        current_balance=new_balance,
        version=F("version") + 1,
    )
    if updated != 1:
        logger.warning(
            "Stale balance version on account %s", account.code,
            extra={"account_id": account.pk, "version": account.version},
        )
        raise SerializationConflict(
            f"Account {account.code} changed concurrently (version {account.version})"
        )
    account.current_balance = new_balance
    account.version += 1


def post_journal_entry(entry_id, user=None):
    """
    Post a draft journal entry to the ledger and return it.

    Raises NotFoundError, AlreadyPostedError, ImbalancedEntryError,
    PeriodClosedError or SerializationConflict; nothing is written on error.
    """
    with translate_conflicts(), transaction.atomic():
        try:
            entry = JournalEntry.objects.select_for_update().get(pk=entry_id)
        except JournalEntry.DoesNotExist:
            raise NotFoundError(f"Journal entry {entry_id} does not exist")

        entry.check_transition("posted")
        lines = list(entry.lines.order_by("line_number"))
        total_debit, total_credit = assert_balanced(lines)
        period = resolve_open_period(entry.date)

        accounts = Account.objects.lock_for_posting(line.account_id for line in lines)
        for account in accounts.values():
            if not account.is_active:
                raise ValidationError(f"Cannot post to inactive account {account.code}")

        for line in lines:
            account = accounts[line.account_id]
            new_balance = account.current_balance + account.balance_delta(
                line.debit_amount, line.credit_amount
            )
            LedgerEntry.objects.create(
                account=account,
                entry=entry,
                line=line,
                date=entry.date,
                description=line.description or entry.description[:400],
                debit_amount=line.debit_amount,
                credit_amount=line.credit_amount,
                running_balance=new_balance,
            )
            _write_balance(account, new_balance)

        entry.status = "posted"
        entry.posted_at = timezone.now()
        entry.period = period
        entry.total_debit = total_debit
        entry.total_credit = total_credit
        if user is not None and entry.created_by_id is None:
            entry.created_by = user
        entry.save()

    logger.info(
        "Posted journal entry %s", entry.number,
        extra={"entry_id": entry.pk, "lines": len(lines), "total": str(total_debit)},
    )
    return entry


def replay_account(account):
    """Recompute an account's balance from its ledger rows in posting order."""
    balance = Decimal("0.00")
    for row in LedgerEntry.objects.for_account(account).only("debit_amount", "credit_amount"):
        balance += account.balance_delta(row.debit_amount, row.credit_amount)
    return balance
