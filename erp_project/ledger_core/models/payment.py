from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from .banking import PAYMENT_METHODS, BankAccount
from .bill import Bill
from .invoice import Invoice
from .journal import JournalEntry


class Payment(models.Model):
    """
    Cash movement against exactly one settlement document:
    an outgoing vendor payment (bill) or an incoming receipt (invoice).

    tds_amount is tax withheld at source; only amount - tds_amount moves
    through the bank, the rest goes to the TDS payable/receivable account.
    """

    bill = models.ForeignKey(
        Bill, null=True, blank=True, on_delete=models.PROTECT, related_name="payments"
    )
    invoice = models.ForeignKey(
        Invoice, null=True, blank=True, on_delete=models.PROTECT, related_name="payments"
    )
    payment_date = models.DateField()
    amount = models.DecimalField(max_digits=18, decimal_places=2)
    method = models.CharField(max_length=20, choices=PAYMENT_METHODS, default="bank_transfer")
    bank_account = models.ForeignKey(
        BankAccount, on_delete=models.PROTECT, related_name="payments"
    )
    tds_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))
    tds_section = models.CharField(max_length=20, blank=True, default="")
    reference = models.CharField(max_length=100, blank=True, default="")
    journal_entry = models.OneToOneField(
        JournalEntry,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="payment",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("payment_date", "pk")
        constraints = [
            # a payment settles a bill or an invoice, never both
            models.CheckConstraint(
                condition=(
                    (models.Q(bill__isnull=False) & models.Q(invoice__isnull=True)) |
                    (models.Q(bill__isnull=True) & models.Q(invoice__isnull=False))
                ),
                name="payment_exactly_one_document",
            ),
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name="payment_amount_positive",
            ),
            models.CheckConstraint(
                condition=(
                    models.Q(tds_amount__gte=0) &
                    models.Q(tds_amount__lte=models.F("amount"))
                ),
                name="payment_tds_within_amount",
            ),
        ]

    def __str__(self):
        target = self.bill or self.invoice
        return f"Payment {self.amount} → {target}"

    def clean(self):
        if bool(self.bill_id) == bool(self.invoice_id):
            raise ValidationError("Payment must reference exactly one bill or invoice.")
        if self.amount is not None and self.amount <= 0:
            raise ValidationError("Payment amount must be > 0")
        if self.tds_amount < 0 or (self.amount is not None and self.tds_amount > self.amount):
            raise ValidationError("TDS amount must be between 0 and the payment amount")

    def save(self, *args, **kwargs):
        if self.pk and Payment.objects.filter(pk=self.pk, journal_entry__isnull=False).exists():
            raise ValidationError("Posted payments cannot be modified.")
        self.full_clean()
        return super().save(*args, **kwargs)
