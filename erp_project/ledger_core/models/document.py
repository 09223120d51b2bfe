from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from ..state import NOTE_TRANSITIONS, SETTLEMENT_TRANSITIONS, DocumentStatus
from .account import Account
from .journal import JournalEntry
from .tax import TaxCode

PURCHASE = "purchase"
SALES = "sales"

# Header fields that may still change after a document leaves draft
# (settlement tracking and posting back-references)
MUTABLE_AFTER_POSTING = {
    "status",
    "amount_paid",
    "balance_due",
    "journal_entry",
    "posted_at",
    "applied_to",
    "applied_amount",
    "updated_at",
}


def _money_field(**kwargs):
    return models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"), **kwargs
    )


class SourceDocument(models.Model):
    """
    Header shared by bills, debit notes, invoices and credit notes.

    Subclasses declare which side of the books they sit on (SIDE), whether
    they reverse an earlier document (IS_NOTE), and the counterparty field
    they carry. Totals are never typed in: they are recomputed from the lines
    by the tax calculator while the document is a draft.
    """

    SIDE = PURCHASE
    IS_NOTE = False
    ENTRY_TYPE = ""
    NUMBER_PREFIX = ""
    COUNTERPARTY_FIELD = ""

    number = models.CharField(max_length=64)
    date = models.DateField()
    due_date = models.DateField(null=True, blank=True)
    # Inter-state supply: IGST instead of the CGST + SGST split
    is_interstate = models.BooleanField(default=False)
    description = models.TextField(blank=True, default="")

    # Totals (sum of lines)
    subtotal = _money_field()
    cgst_amount = _money_field()
    sgst_amount = _money_field()
    igst_amount = _money_field()
    cess_amount = _money_field()
    total_tax = _money_field()
    total_amount = _money_field()

    # Settlement tracking
    amount_paid = _money_field()
    balance_due = _money_field()

    status = models.CharField(
        max_length=10, choices=DocumentStatus.choices, default=DocumentStatus.DRAFT
    )
    # Entry created when the document was posted (1:1)
    journal_entry = models.OneToOneField(
        JournalEntry,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="%(class)s_document",
    )
    posted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def __str__(self):
        return f"{self.__class__.__name__} {self.number}"

    @property
    def transitions(self):
        return NOTE_TRANSITIONS if self.IS_NOTE else SETTLEMENT_TRANSITIONS

    @property
    def counterparty(self):
        return getattr(self, self.COUNTERPARTY_FIELD)

    @property
    def is_draft(self):
        return self.status == DocumentStatus.DRAFT

    def default_control_account(self):
        """Counterparty-level control account override, if one is set."""
        return None

    """ Ensure the stored totals are always in sync with the lines """

    def recalc_totals(self):
        from ..services.tax import sum_lines

        if not self.is_draft:
            raise ValidationError(
                f"Cannot recalculate totals of a {self.status} document.")
        totals = sum_lines(self.lines.all())
        self.subtotal = totals.subtotal
        self.cgst_amount = totals.cgst_amount
        self.sgst_amount = totals.sgst_amount
        self.igst_amount = totals.igst_amount
        self.cess_amount = totals.cess_amount
        self.total_tax = totals.total_tax
        self.total_amount = totals.total_amount
        # Nothing can be paid against a draft
        self.amount_paid = Decimal("0.00")
        self.balance_due = totals.total_amount

    def clean(self):
        if self.balance_due < 0:
            # otherwise credits/payments could overpay a document
            # and mess up reporting
            raise ValidationError("Balance due cannot be negative")

    def save(self, *args, **kwargs):
        """Make posted documents immutable in all code paths"""
        if self.pk:
            orig = type(self).objects.filter(pk=self.pk).first()
            if orig and orig.status != DocumentStatus.DRAFT:
                changed = [
                    f.name
                    for f in self._meta.concrete_fields
                    if f.name not in MUTABLE_AFTER_POSTING
                    and getattr(orig, f.attname) != getattr(self, f.attname)
                ]
                if changed:
                    raise ValidationError(
                        f"Cannot modify {changed} on a {orig.status} document.")
        self.full_clean()
        return super().save(*args, **kwargs)


class SourceDocumentLine(models.Model):
    """
    Detail line shared by all source documents: quantity × price less
    discount, optional tax code, computed tax breakdown.
    Subclasses add `document = ForeignKey(<header>, related_name="lines")`.
    """

    line_number = models.PositiveIntegerField(default=1)
    # Posts to the expense / revenue / asset account in the GL
    account = models.ForeignKey(Account, on_delete=models.PROTECT, related_name="+")
    description = models.CharField(max_length=400, blank=True, default="")

    quantity = models.DecimalField(max_digits=14, decimal_places=4, default=Decimal("1"))
    unit_price = models.DecimalField(max_digits=18, decimal_places=4, default=Decimal("0"))
    discount_percent = models.DecimalField(max_digits=7, decimal_places=4, default=Decimal("0"))
    tax_code = models.ForeignKey(
        TaxCode, null=True, blank=True, on_delete=models.PROTECT, related_name="+"
    )

    # Computed by the tax calculator on every save
    net_amount = _money_field()
    cgst_amount = _money_field()
    sgst_amount = _money_field()
    igst_amount = _money_field()
    cess_amount = _money_field()
    total_amount = _money_field()

    class Meta:
        abstract = True
        ordering = ("document", "line_number")

    def __str__(self):
        return f"{self.document_id}#{self.line_number} {self.total_amount}"

    def apply_tax(self):
        from ..services.tax import tax_for_line

        tax = tax_for_line(self)
        self.net_amount = tax.net_amount
        self.cgst_amount = tax.cgst_amount
        self.sgst_amount = tax.sgst_amount
        self.igst_amount = tax.igst_amount
        self.cess_amount = tax.cess_amount
        self.total_amount = tax.total_amount

    def clean(self):
        if self.document_id and not self.document.is_draft:
            raise ValidationError(
                "Lines can only change while the document is a draft.")
        if self.account_id and not self.account.is_active:
            raise ValidationError("Line account is inactive.")

    """ Ensure no inconsistent line can ever be persisted """

    def save(self, *args, **kwargs):
        # Force the breakdown to be recomputed before save, regardless of input
        self.apply_tax()
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if not self.document.is_draft:
            raise ValidationError(
                "Lines can only be removed while the document is a draft.")
        return super().delete(*args, **kwargs)
