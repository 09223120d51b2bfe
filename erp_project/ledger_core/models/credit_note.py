from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from .customer import Customer
from .document import SALES, SourceDocument, SourceDocumentLine
from .invoice import Invoice


class CreditNote(SourceDocument):
    """Sales return against a customer: Dr returns + output tax, Cr AR."""

    SIDE = SALES
    IS_NOTE = True
    ENTRY_TYPE = "credit_note"
    NUMBER_PREFIX = "JE-CN"
    COUNTERPARTY_FIELD = "customer"

    customer = models.ForeignKey(
        Customer, on_delete=models.PROTECT, related_name="credit_notes"
    )
    original_document = models.ForeignKey(
        Invoice,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="credit_notes",
    )
    applied_to = models.ForeignKey(
        Invoice,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="applied_credit_notes",
    )
    applied_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["number"], name="uq_creditnote_number"),
        ]

    def default_control_account(self):
        return self.customer.default_ar_account

    def clean(self):
        super().clean()
        for invoice in (self.original_document, self.applied_to):
            if invoice is not None and invoice.customer_id != self.customer_id:
                raise ValidationError("Credit note and invoice must share a customer.")


class CreditNoteLine(SourceDocumentLine):
    document = models.ForeignKey(
        CreditNote, on_delete=models.CASCADE, related_name="lines"
    )

    class Meta(SourceDocumentLine.Meta):
        constraints = [
            models.UniqueConstraint(
                fields=["document", "line_number"], name="uq_creditnoteline_number"
            ),
        ]
