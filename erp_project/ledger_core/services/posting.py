"""
Document posting workflows: bills, debit notes, invoices, credit notes.

    lock document -> state machine -> recalculate lines -> resolve accounts
    -> build legs -> create entry -> post to ledger -> flip document -> audit

all inside one transaction.atomic(), so a failure at any step leaves the
document in draft with no journal entry and no ledger rows.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from ..exceptions import LedgerError, NotFoundError
from ..models import Bill, CreditNote, DebitNote, Invoice
from ..state import DocumentEvent, transition
from .accounts import DocumentAccounts
from .audit_helper import log_action, snapshot
from .journal import build_document_lines, create_journal_entry
from .ledger import post_journal_entry, translate_conflicts
from .retry import retry_on_conflict

logger = logging.getLogger(__name__)

TOTAL_FIELDS = [
    "subtotal", "cgst_amount", "sgst_amount", "igst_amount",
    "cess_amount", "total_tax", "total_amount", "balance_due",
]


@dataclass(frozen=True)
class PostResult:
    journal_entry_id: Optional[int]
    status: str


def lock_document(model, document_id):
    # Lock the row to avoid race conditions
    try:
        return model.objects.select_for_update().get(pk=document_id)
    except model.DoesNotExist:
        raise NotFoundError(f"{model.__name__} {document_id} does not exist")


def recalculate_document(document):
    """
    Re-run the tax calculator over every line, then the header totals.
    Draft documents only.
    """
    if not document.is_draft:
        raise ValidationError(
            f"Cannot recalculate a {document.status} {document.__class__.__name__}.")
    for line in document.lines.all():
        line.save()  # save() recomputes the tax breakdown
    document.recalc_totals()
    document.save()
    return document


def post_document(model, document_id, user=None) -> PostResult:
    try:
        with translate_conflicts(), transaction.atomic():
            document = lock_document(model, document_id)
            new_status = transition(document.transitions, document.status, DocumentEvent.POST)

            recalculate_document(document)
            if document.total_amount <= 0:
                raise ValidationError(
                    f"{model.__name__} {document.number} total must be > 0 to post")

            accounts = DocumentAccounts(document)
            entry = create_journal_entry(
                number=f"{document.NUMBER_PREFIX}-{document.pk}",
                date=document.date,
                entry_type=document.ENTRY_TYPE,
                description=f"{model.__name__} {document.number} - {document.counterparty}",
                lines=build_document_lines(document, accounts),
                source=document,
                user=user,
            )
            post_journal_entry(entry.pk, user=user)

            document.status = new_status
            document.journal_entry = entry
            document.posted_at = timezone.now()
            document.save()

            log_action(
                action="post",
                instance=document,
                user=user,
                changes={"journal_entry": entry.number, **snapshot(document, TOTAL_FIELDS)},
            )
    except LedgerError as exc:
        logger.warning(
            "Posting %s %s failed: %s", model.__name__, document_id, exc,
            extra={"code": exc.code},
        )
        raise

    logger.info(
        "Posted %s %s as %s", model.__name__, document.number, entry.number,
        extra={"document_id": document.pk, "total": str(document.total_amount)},
    )
    return PostResult(journal_entry_id=entry.pk, status=document.status)


def void_document(model, document_id, user=None) -> PostResult:
    """Void a draft document. Posted documents are reversed with a note instead."""
    with translate_conflicts(), transaction.atomic():
        document = lock_document(model, document_id)
        previous = document.status
        document.status = transition(document.transitions, previous, DocumentEvent.VOID)
        document.save()
        log_action(
            action="void",
            instance=document,
            user=user,
            changes={"status": [previous, document.status]},
        )
    logger.info("Voided %s %s", model.__name__, document.number)
    return PostResult(journal_entry_id=None, status=document.status)


@retry_on_conflict
def post_bill(bill_id, user=None):
    return post_document(Bill, bill_id, user=user)


@retry_on_conflict
def post_debit_note(note_id, user=None):
    return post_document(DebitNote, note_id, user=user)


@retry_on_conflict
def post_invoice(invoice_id, user=None):
    return post_document(Invoice, invoice_id, user=user)


@retry_on_conflict
def post_credit_note(note_id, user=None):
    return post_document(CreditNote, note_id, user=user)
