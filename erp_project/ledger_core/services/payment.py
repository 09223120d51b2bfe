"""
Payment Allocator.

Settles posted bills and invoices with cash (pay_bill / receive_payment) or
with a posted note (apply_debit_note / apply_credit_note). balance_due only
ever goes down and never below zero; the document status follows from what
is left (paid at zero, partial otherwise).
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from ..exceptions import LedgerError, NotFoundError, OverpaymentError
from ..models import BankAccount, Bill, CreditNote, DebitNote, Invoice, Payment
from ..state import DocumentEvent, DocumentStatus, settlement_event, transition
from .accounts import bank_ledger_account, control_account_for, tds_account
from .audit_helper import log_action
from .journal import build_settlement_lines, create_journal_entry
from .ledger import post_journal_entry, translate_conflicts
from .posting import lock_document
from .retry import retry_on_conflict
from .tax import ZERO, money

logger = logging.getLogger(__name__)

OPEN_STATUSES = (DocumentStatus.POSTED, DocumentStatus.PARTIAL)
# A paid document still takes the balance check (balance_due is 0)
PAYABLE_STATUSES = OPEN_STATUSES + (DocumentStatus.PAID,)


@dataclass(frozen=True)
class PaymentResult:
    balance_due: Decimal
    status: str
    journal_entry_id: int
    payment_id: int


@dataclass(frozen=True)
class ApplyResult:
    applied_amount: Decimal
    new_balance_due: Decimal


def _require_open(document, event, statuses=OPEN_STATUSES):
    # Drafts raise NotPostedError, anything else outside statuses IllegalTransitionError
    if document.status not in statuses:
        transition(document.transitions, document.status, event)


def _settle(model, document_id, *, amount, method, bank_account_id, tds_amount,
            tds_section, payment_date, reference, user):
    receipt = model is Invoice
    amount = money(amount)
    tds_amount = money(tds_amount)

    with translate_conflicts(), transaction.atomic():
        document = lock_document(model, document_id)
        _require_open(document, DocumentEvent.PAY_PARTIAL, PAYABLE_STATUSES)

        if amount <= 0:
            raise ValidationError("Payment amount must be > 0")
        if tds_amount < 0 or tds_amount > amount:
            raise ValidationError("TDS amount must be between 0 and the payment amount")
        if amount > document.balance_due:
            raise OverpaymentError(amount, document.balance_due)

        new_balance = document.balance_due - amount
        new_status = transition(
            document.transitions, document.status, settlement_event(new_balance)
        )

        try:
            bank_account = BankAccount.objects.get(pk=bank_account_id)
        except BankAccount.DoesNotExist:
            raise NotFoundError(f"Bank account {bank_account_id} does not exist")

        payment = Payment.objects.create(
            bill=None if receipt else document,
            invoice=document if receipt else None,
            payment_date=payment_date or timezone.localdate(),
            amount=amount,
            method=method,
            bank_account=bank_account,
            tds_amount=tds_amount,
            tds_section=tds_section,
            reference=reference,
        )
        lines = build_settlement_lines(
            amount=amount,
            tds_amount=tds_amount,
            bank_account=bank_ledger_account(bank_account),
            control_account=control_account_for(document),
            tds_account=tds_account(receipt) if tds_amount else None,
            receipt=receipt,
            description=f"{'Receipt' if receipt else 'Payment'} for {model.__name__} {document.number}",
        )
        entry = create_journal_entry(
            number=f"JE-{'RCPT' if receipt else 'PMT'}-{payment.pk}",
            date=payment.payment_date,
            entry_type="receipt" if receipt else "payment",
            description=lines[0].description,
            lines=lines,
            source=payment,
            user=user,
        )
        post_journal_entry(entry.pk, user=user)

        payment.journal_entry = entry
        payment.save()

        # Update document balance and status
        previous = {"balance_due": str(document.balance_due), "status": document.status}
        document.amount_paid += amount
        document.balance_due = new_balance
        document.status = new_status
        document.save()

        log_action(
            action="receive" if receipt else "pay",
            instance=document,
            user=user,
            changes={
                "payment": payment.pk,
                "amount": str(amount),
                "tds_amount": str(tds_amount),
                "before": previous,
                "after": {"balance_due": str(new_balance), "status": new_status},
            },
        )

    logger.info(
        "%s of %s against %s %s, balance due %s",
        "Receipt" if receipt else "Payment", amount, model.__name__, document.number,
        new_balance, extra={"payment_id": payment.pk, "entry_id": entry.pk},
    )
    return PaymentResult(
        balance_due=new_balance,
        status=new_status,
        journal_entry_id=entry.pk,
        payment_id=payment.pk,
    )


def _settle_logged(model, document_id, **kwargs):
    try:
        return _settle(model, document_id, **kwargs)
    except LedgerError as exc:
        logger.warning(
            "Settling %s %s failed: %s", model.__name__, document_id, exc,
            extra={"code": exc.code},
        )
        raise


@retry_on_conflict
def pay_bill(bill_id, amount, method, bank_account_id, tds_amount=ZERO,
             payment_date=None, tds_section="", reference="", user=None) -> PaymentResult:
    """Pay a posted vendor bill (fully or in part), withholding optional TDS."""
    return _settle_logged(
        Bill, bill_id, amount=amount, method=method, bank_account_id=bank_account_id,
        tds_amount=tds_amount, tds_section=tds_section, payment_date=payment_date,
        reference=reference, user=user,
    )


@retry_on_conflict
def receive_payment(invoice_id, amount, method, bank_account_id, tds_amount=ZERO,
                    payment_date=None, tds_section="", reference="", user=None) -> PaymentResult:
    """Record a customer receipt against a posted invoice."""
    return _settle_logged(
        Invoice, invoice_id, amount=amount, method=method, bank_account_id=bank_account_id,
        tds_amount=tds_amount, tds_section=tds_section, payment_date=payment_date,
        reference=reference, user=user,
    )


def _apply_note(note_model, target_model, note_id, target_id, user=None) -> ApplyResult:
    """
    Offset a posted note against a posted target document.

    applied = min(note total, target balance_due). No journal entry is
    created: the note's own posting already moved the control account.
    """
    with translate_conflicts(), transaction.atomic():
        note = lock_document(note_model, note_id)
        if note.status != DocumentStatus.POSTED:
            transition(note.transitions, note.status, DocumentEvent.APPLY)

        target = lock_document(target_model, target_id)
        if target.counterparty != note.counterparty:
            raise ValidationError(
                f"{note_model.__name__} {note.number} and {target_model.__name__} "
                f"{target.number} belong to different parties")
        _require_open(target, DocumentEvent.PAY_PARTIAL)

        applied = min(note.total_amount, target.balance_due)
        new_balance = target.balance_due - applied
        target_status = transition(
            target.transitions, target.status, settlement_event(new_balance)
        )
        note_status = transition(note.transitions, note.status, DocumentEvent.APPLY)

        target.balance_due = new_balance
        target.status = target_status
        target.save()

        note.status = note_status
        note.applied_to = target
        note.applied_amount = applied
        note.save()

        log_action(
            action="apply",
            instance=note,
            user=user,
            changes={
                "applied_to": target.pk,
                "applied_amount": str(applied),
                "new_balance_due": str(new_balance),
            },
        )

    logger.info(
        "Applied %s %s to %s %s: %s, balance due %s",
        note_model.__name__, note.number, target_model.__name__, target.number,
        applied, new_balance,
    )
    return ApplyResult(applied_amount=applied, new_balance_due=new_balance)


@retry_on_conflict
def apply_debit_note(note_id, bill_id, user=None) -> ApplyResult:
    return _apply_note(DebitNote, Bill, note_id, bill_id, user=user)


@retry_on_conflict
def apply_credit_note(note_id, invoice_id, user=None) -> ApplyResult:
    return _apply_note(CreditNote, Invoice, note_id, invoice_id, user=user)
