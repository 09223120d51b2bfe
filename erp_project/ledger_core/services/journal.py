"""
Journal Entry Builder.

Turns a posted-to-be document or a payment into balanced journal legs and
persists them as a draft JournalEntry. Nothing is written unless the legs
balance.

Document direction (net legs, tax legs, then the control leg):

    Bill         Dr line accounts + input tax     Cr AP
    DebitNote    Cr line accounts + input tax     Dr AP
    Invoice      Cr line accounts + output tax    Dr AR
    CreditNote   Dr line accounts + output tax    Cr AR

Settlement:

    payment      Dr AP amount            Cr bank (amount - tds), Cr TDS payable tds
    receipt      Dr bank (amount - tds), Dr TDS receivable tds    Cr AR amount
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Tuple

from ..exceptions import ImbalancedEntryError
from ..models import Account, JournalEntry, JournalLine
from ..models.document import PURCHASE
from .tax import ZERO, sum_lines

logger = logging.getLogger(__name__)

# 0.01 of the minor unit
BALANCE_TOLERANCE = Decimal("0.0001")

TAX_COMPONENTS = ("cgst", "sgst", "igst", "cess")


@dataclass(frozen=True)
class LineSpec:
    """One journal leg before it is persisted."""

    account: Account
    debit_amount: Decimal = ZERO
    credit_amount: Decimal = ZERO
    description: str = ""


def debit(account, amount, description="") -> LineSpec:
    return LineSpec(account=account, debit_amount=amount, description=description)


def credit(account, amount, description="") -> LineSpec:
    return LineSpec(account=account, credit_amount=amount, description=description)


def _leg(on_debit, account, amount, description=""):
    return debit(account, amount, description) if on_debit else credit(account, amount, description)


def assert_balanced(lines: Iterable) -> Tuple[Decimal, Decimal]:
    """
    Return (total_debit, total_credit) or raise ImbalancedEntryError.
    Works on LineSpec values and saved JournalLine rows alike.
    """
    lines = list(lines)
    total_debit = sum((line.debit_amount for line in lines), ZERO)
    total_credit = sum((line.credit_amount for line in lines), ZERO)
    if not lines or abs(total_debit - total_credit) > BALANCE_TOLERANCE:
        raise ImbalancedEntryError(total_debit, total_credit)
    return total_debit, total_credit


def build_document_lines(document, accounts) -> List[LineSpec]:
    """
    Legs for posting a bill, invoice or note.

    `accounts` is a services.accounts.DocumentAccounts. Line accounts are
    aggregated in first-seen order so one expense account shared by many
    lines gets a single leg.
    """
    # Purchases debit their lines, sales credit them; a note flips the side
    lines_on_debit = (document.SIDE == PURCHASE) != document.IS_NOTE
    label = f"{document.__class__.__name__} {document.number}"

    doc_lines = list(document.lines.select_related("account").order_by("line_number"))
    net_by_account = {}
    for line in doc_lines:
        account, amount = net_by_account.get(line.account_id, (line.account, ZERO))
        net_by_account[line.account_id] = (account, amount + line.net_amount)

    legs = [
        _leg(lines_on_debit, account, amount, label)
        for account, amount in net_by_account.values()
        if amount
    ]

    totals = sum_lines(doc_lines)
    for component in TAX_COMPONENTS:
        amount = getattr(totals, f"{component}_amount")
        if amount:
            legs.append(
                _leg(lines_on_debit, accounts.tax(component), amount,
                     f"{component.upper()} on {label}")
            )

    if totals.total_amount:
        legs.append(_leg(not lines_on_debit, accounts.control, totals.total_amount, label))
    return legs


def build_settlement_lines(*, amount, tds_amount, bank_account, control_account,
                           tds_account=None, receipt=False, description=""):
    """Legs for a vendor payment (receipt=False) or a customer receipt."""
    bank_amount = amount - tds_amount
    if receipt:
        legs = [
            debit(bank_account, bank_amount, description),
            debit(tds_account, tds_amount, description) if tds_amount else None,
            credit(control_account, amount, description),
        ]
    else:
        legs = [
            debit(control_account, amount, description),
            credit(bank_account, bank_amount, description),
            credit(tds_account, tds_amount, description) if tds_amount else None,
        ]
    # zero legs are dropped (e.g. a payment fully withheld as TDS)
    return [
        leg for leg in legs
        if leg is not None and (leg.debit_amount or leg.credit_amount)
    ]


def create_journal_entry(*, number, date, entry_type, lines, description="",
                         source=None, user=None) -> JournalEntry:
    """
    Persist a draft JournalEntry with numbered lines.
    The balance check runs first so an imbalanced entry leaves no rows behind.
    """
    lines = list(lines)
    total_debit, total_credit = assert_balanced(lines)

    entry = JournalEntry.objects.create(
        number=number,
        date=date,
        entry_type=entry_type,
        description=description,
        status="draft",
        total_debit=total_debit,
        total_credit=total_credit,
        source_type=source.__class__.__name__.lower() if source is not None else "",
        source_id=source.pk if source is not None else None,
        created_by=user,
    )
    for line_number, leg in enumerate(lines, start=1):
        JournalLine.objects.create(
            entry=entry,
            line_number=line_number,
            account=leg.account,
            description=leg.description[:400],
            debit_amount=leg.debit_amount,
            credit_amount=leg.credit_amount,
        )
    logger.debug(
        "Built journal entry %s with %d lines", number, len(lines),
        extra={"entry_id": entry.pk, "total": str(total_debit)},
    )
    return entry
