from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from ..managers import LedgerEntryManager
from .account import Account
from .journal import JournalEntry, JournalLine


class LedgerEntry(models.Model):
    """
    Append-only ledger row: one per journal line per posting.

    running_balance is the account's current_balance immediately after
    this row was applied, so replaying an account's rows in id order
    reproduces its balance.
    """

    account = models.ForeignKey(Account, on_delete=models.PROTECT, related_name="ledger_entries")
    entry = models.ForeignKey(JournalEntry, on_delete=models.PROTECT, related_name="ledger_entries")
    line = models.OneToOneField(JournalLine, on_delete=models.PROTECT, related_name="ledger_entry")
    date = models.DateField()
    description = models.CharField(max_length=400, blank=True, default="")
    debit_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))
    credit_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))
    running_balance = models.DecimalField(max_digits=18, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = LedgerEntryManager()

    class Meta:
        ordering = ("account", "pk")
        indexes = [
            models.Index(fields=["account", "date"], name="le_account_date_idx"),
        ]
        verbose_name_plural = "ledger entries"

    def __str__(self):
        return (
            f"{self.account_id} {self.date} D:{self.debit_amount} "
            f"C:{self.credit_amount} = {self.running_balance}"
        )

    def save(self, *args, **kwargs):
        # rows are written once by the poster and never rewritten
        if self.pk:
            raise ValidationError("Ledger entries are immutable.")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Ledger entries cannot be deleted.")
