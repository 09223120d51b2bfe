from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from .bill import Bill
from .document import PURCHASE, SourceDocument, SourceDocumentLine
from .vendor import Vendor


class DebitNote(SourceDocument):
    """
    Purchase return / price correction raised against a vendor.

    Posting reverses the bill shape (Dr AP, Cr expense and input tax).
    Applying it later only reduces the target bill's balance_due.
    """

    SIDE = PURCHASE
    IS_NOTE = True
    ENTRY_TYPE = "debit_note"
    NUMBER_PREFIX = "JE-DN"
    COUNTERPARTY_FIELD = "vendor"

    vendor = models.ForeignKey(
        Vendor, on_delete=models.PROTECT, related_name="debit_notes"
    )
    # Bill the note was raised against (informational)
    original_document = models.ForeignKey(
        Bill,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="debit_notes",
    )
    # Bill whose balance it actually reduced (set on apply)
    applied_to = models.ForeignKey(
        Bill,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="applied_debit_notes",
    )
    applied_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["vendor", "number"], name="uq_debitnote_vendor_number"
            ),
        ]

    def default_control_account(self):
        return self.vendor.default_ap_account

    def clean(self):
        super().clean()
        for bill in (self.original_document, self.applied_to):
            if bill is not None and bill.vendor_id != self.vendor_id:
                raise ValidationError("Debit note and bill must share a vendor.")


class DebitNoteLine(SourceDocumentLine):
    document = models.ForeignKey(
        DebitNote, on_delete=models.CASCADE, related_name="lines"
    )

    class Meta(SourceDocumentLine.Meta):
        constraints = [
            models.UniqueConstraint(
                fields=["document", "line_number"], name="uq_debitnoteline_number"
            ),
        ]
