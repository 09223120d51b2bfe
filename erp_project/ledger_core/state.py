"""
Document lifecycle as an explicit transition table.

Settlement documents (bills, invoices):
    draft -> posted -> partial -> paid
Notes (debit notes, credit notes):
    draft -> posted -> applied
Both:
    draft -> void

Only the (status, event) pairs listed below are legal; everything else is
rejected here rather than by status checks scattered through the services.
"""

from django.db import models

from .exceptions import AlreadyPostedError, IllegalTransitionError, NotPostedError


class DocumentStatus(models.TextChoices):
    DRAFT = "draft", "Draft"
    POSTED = "posted", "Posted"
    PARTIAL = "partial", "Partially paid"
    PAID = "paid", "Paid"
    APPLIED = "applied", "Applied"
    VOID = "void", "Void"


class DocumentEvent(models.TextChoices):
    POST = "post", "Post"
    PAY_PARTIAL = "pay_partial", "Partial payment"
    PAY_FULL = "pay_full", "Full payment"
    APPLY = "apply", "Apply"
    VOID = "void", "Void"


S, E = DocumentStatus, DocumentEvent

SETTLEMENT_TRANSITIONS = {
    (S.DRAFT, E.POST): S.POSTED,
    (S.DRAFT, E.VOID): S.VOID,
    (S.POSTED, E.PAY_PARTIAL): S.PARTIAL,
    (S.POSTED, E.PAY_FULL): S.PAID,
    (S.PARTIAL, E.PAY_PARTIAL): S.PARTIAL,
    (S.PARTIAL, E.PAY_FULL): S.PAID,
}

NOTE_TRANSITIONS = {
    (S.DRAFT, E.POST): S.POSTED,
    (S.DRAFT, E.VOID): S.VOID,
    (S.POSTED, E.APPLY): S.APPLIED,
}

_SETTLE_EVENTS = (E.PAY_PARTIAL, E.PAY_FULL, E.APPLY)


def transition(table, current, event):
    """Return the status reached from ``current`` on ``event`` or raise."""
    current = DocumentStatus(current)
    event = DocumentEvent(event)
    try:
        return table[(current, event)]
    except KeyError:
        pass

    if event == E.POST:
        raise AlreadyPostedError(current, event, f"Document is already {current.value}")
    if current == S.DRAFT and event in _SETTLE_EVENTS:
        raise NotPostedError(current, event, "Document must be posted first")
    raise IllegalTransitionError(current, event)


def settlement_event(new_balance_due):
    """Pick the payment event from the balance left after applying an amount."""
    return E.PAY_FULL if new_balance_due <= 0 else E.PAY_PARTIAL
