from django.core.exceptions import ValidationError
from django.db import models

from .account import Account

PAYMENT_METHODS = [
    # Keeps payment method standardized across payment records
    ("cash", "Cash"),
    ("cheque", "Cheque"),
    ("bank_transfer", "Bank Transfer"),
    ("card", "Card"),
    ("upi", "UPI"),
    ("other", "Other"),
]


class BankAccount(models.Model):  # Represents a bank account the business holds
    name = models.CharField(
        max_length=200, unique=True
    )  # e.g. "Current Account", "Petty Cash"
    # Partial account number for display/security
    account_number_masked = models.CharField(max_length=50, blank=True, default="")

    # The chart-of-accounts entry that payments through this bank hit
    ledger_account = models.ForeignKey(
        Account,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="bank_accounts",
    )

    def __str__(self):
        if self.account_number_masked:
            return f"{self.name} ({self.account_number_masked})"
        return self.name

    def clean(self):
        if self.ledger_account and self.ledger_account.category != "asset":
            raise ValidationError("Bank ledger account must be an asset account.")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
