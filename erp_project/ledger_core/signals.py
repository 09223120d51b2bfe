from django.core.exceptions import ValidationError
from django.db.models.signals import post_delete, post_save, pre_delete
from django.dispatch import receiver

from .models import (Account, Bill, BillLine, CreditNote, CreditNoteLine,
                     DebitNote, DebitNoteLine, Invoice, InvoiceLine,
                     JournalEntry, LedgerEntry, Period)

DOCUMENT_MODELS = (Bill, DebitNote, Invoice, CreditNote)
LINE_MODELS = (BillLine, DebitNoteLine, InvoiceLine, CreditNoteLine)

"""
    Recalculate document totals when a line is added/updated/removed.
    Use update via model methods to keep validation/consistency.
"""


def document_line_changed(sender, instance, **kwargs):
    doc_model = sender._meta.get_field("document").related_model
    # parent may already be gone when lines are removed by cascade
    doc = doc_model.objects.filter(pk=instance.document_id).first()
    if doc is None or not doc.is_draft:
        return
    doc.recalc_totals()
    doc.save()


for _line_model in LINE_MODELS:
    post_save.connect(document_line_changed, sender=_line_model,
                      dispatch_uid=f"recalc_{_line_model.__name__}")
    post_delete.connect(document_line_changed, sender=_line_model,
                        dispatch_uid=f"recalc_delete_{_line_model.__name__}")


"""Block document deletion once it has left draft (void or reverse it instead)."""


def prevent_delete_non_draft_document(sender, instance, **kwargs):
    if not instance.is_draft:
        raise ValidationError(
            f"Cannot delete a {instance.status} {sender.__name__}.")


for _doc_model in DOCUMENT_MODELS:
    pre_delete.connect(prevent_delete_non_draft_document, sender=_doc_model,
                       dispatch_uid=f"guard_delete_{_doc_model.__name__}")


"""Block deletion if account has ever been used in a journal line."""


@receiver(pre_delete, sender=Account)
def prevent_delete_account_with_ledger_rows(sender, instance, **kwargs):
    if instance.journal_lines.exists() or instance.ledger_entries.exists():
        raise ValidationError("Cannot delete account used in journal lines.")


@receiver(pre_delete, sender=JournalEntry)
def prevent_delete_posted_journal(sender, instance, **kwargs):
    if instance.status == "posted":
        raise ValidationError("Cannot delete a posted journal entry.")


# QuerySet.delete() bypasses LedgerEntry.delete(); this catches bulk deletes
@receiver(pre_delete, sender=LedgerEntry)
def prevent_delete_ledger_entry(sender, instance, **kwargs):
    raise ValidationError("Ledger entries cannot be deleted.")


"""Block deletion if period has posted journals."""


@receiver(pre_delete, sender=Period)
def prevent_delete_period_with_posted_journals(sender, instance, **kwargs):
    if JournalEntry.objects.filter(period=instance, status="posted").exists():
        raise ValidationError(
            "Cannot delete a period with posted journal entries.")
