from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from ..exceptions import AlreadyPostedError, IllegalTransitionError
from .account import Account
from .period import Period

JOURNAL_STATUS = [
    ("draft", "Draft"),  # built, not yet applied to the ledger
    ("posted", "Posted"),  # applied to the ledger, immutable
]

ENTRY_TYPES = [
    ("bill", "Vendor bill"),
    ("debit_note", "Debit note"),
    ("payment", "Vendor payment"),
    ("invoice", "Customer invoice"),
    ("credit_note", "Credit note"),
    ("receipt", "Customer receipt"),
]

# Entry status workflow; an entry is never un-posted
ENTRY_TRANSITIONS = {
    "draft": ["posted"],
    "posted": [],
}


# ---------- Journal (Header) & JournalLine ----------
class JournalEntry(models.Model):  # Represents one accounting transaction
    # Human-readable number, e.g. "JE-BILL-INV-4567"
    number = models.CharField(max_length=64, unique=True)
    date = models.DateField()
    entry_type = models.CharField(max_length=20, choices=ENTRY_TYPES)
    description = models.TextField(blank=True, default="")
    status = models.CharField(max_length=10, choices=JOURNAL_STATUS, default="draft")

    # Stored totals, equal to the sums over the lines
    total_debit = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))
    total_credit = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))

    # Accounting period the entry date fell into at posting time (if any)
    period = models.ForeignKey(
        Period,
        null=True,
        blank=True,
        on_delete=models.PROTECT,  # Prevent breaking historical ledger
    )
    posted_at = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True, on_delete=models.SET_NULL
    )

    # polymorphic source info (bill, debit_note, payment, ...)
    # Helps trace back where the JE originated
    source_type = models.CharField(max_length=50, blank=True, default="")
    source_id = models.BigIntegerField(null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=["date"], name="je_date_idx"),
            models.Index(fields=["status"], name="je_status_idx"),
            models.Index(fields=["source_type", "source_id"], name="je_source_idx"),
        ]
        verbose_name_plural = "journal entries"

    def __str__(self):
        return f"{self.number} {self.date} [{self.status}]"

    # Aggregate all debit and credit amounts across entry’s lines
    def compute_totals(self):
        """Return debits, credits sums for lines"""
        aggs = self.lines.aggregate(
            total_debit=models.Sum("debit_amount"),
            total_credit=models.Sum("credit_amount"),
        )
        return (
            aggs["total_debit"] or Decimal("0.00"),
            aggs["total_credit"] or Decimal("0.00"),
        )

    # True if double-entry rule holds: total debits = total credits
    def is_balanced(self):
        debit, credit = self.compute_totals()
        return debit == credit

    def check_transition(self, new_status):
        if new_status in ENTRY_TRANSITIONS.get(self.status, []):
            return
        if new_status == "posted":
            raise AlreadyPostedError(
                self.status, "post", f"Journal entry {self.number} is already {self.status}"
            )
        raise IllegalTransitionError(self.status, new_status)

    def save(self, *args, **kwargs):
        if self.pk:  # Does this row already exist in DB?
            orig = JournalEntry.objects.filter(pk=self.pk).values("status").first()
            # Check if journal was already posted
            if orig and orig["status"] == "posted" and self.status != "posted":
                # disallow toggling posted flag
                raise ValidationError("Cannot unpost a posted journal")
        super().save(*args, **kwargs)


class JournalLine(models.Model):  # Stores Lines ( credits / debits )
    """
    Each line belongs to a journal entry and to one ledger account,
    with exactly one of debit_amount / credit_amount non-zero.
    """

    entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.CASCADE,
        related_name="lines",
    )
    line_number = models.PositiveIntegerField()

    # Must point to one Account (can’t delete account if lines exist → PROTECT)
    account = models.ForeignKey(Account, on_delete=models.PROTECT, related_name="journal_lines")
    description = models.CharField(max_length=400, blank=True, default="")

    debit_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))
    credit_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ("entry", "line_number")
        constraints = [
            models.UniqueConstraint(
                fields=["entry", "line_number"], name="uq_jl_entry_line_number"
            ),
            # Enforce debits and credits must be non-negative
            models.CheckConstraint(
                condition=(
                    models.Q(debit_amount__gte=0) &
                    models.Q(credit_amount__gte=0)
                ),
                name="jl_non_negative_amounts",
            ),
            # exactly one side carries the amount
            models.CheckConstraint(
                condition=(
                    (models.Q(debit_amount=0) & models.Q(credit_amount__gt=0)) |
                    (models.Q(debit_amount__gt=0) & models.Q(credit_amount=0))
                ),
                name="jl_debit_xor_credit",
            ),
        ]

    def __str__(self):
        return (
            f"{self.entry_id}#{self.line_number} | {self.account_id} "
            f"| D:{self.debit_amount} C:{self.credit_amount}"
        )

    def clean(self):
        # (redundant with CheckConstraint but useful at app-level)
        if self.debit_amount < 0 or self.credit_amount < 0:
            raise ValidationError("Debit and credit must be >= 0")
        if self.debit_amount > 0 and self.credit_amount > 0:
            raise ValidationError(
                "JournalLine should not have both debit and credit > 0"
            )
        if self.debit_amount == 0 and self.credit_amount == 0:
            raise ValidationError(
                "JournalLine requires a non-0 amount on either debit or credit"
            )

        # Lines of a posted entry are frozen
        if self.entry_id and JournalEntry.objects.filter(
            pk=self.entry_id, status="posted"
        ).exists():
            raise ValidationError(
                "Cannot add or modify JournalLine: parent journal is posted."
            )

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        # Prevent deletion if parent journal is posted
        if JournalEntry.objects.filter(pk=self.entry_id, status="posted").exists():
            raise ValidationError(
                "Cannot delete JournalLine: parent JournalEntry is posted."
            )
        return super().delete(*args, **kwargs)
