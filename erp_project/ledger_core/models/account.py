from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from ..managers import AccountManager

# Choice Lists
ACCOUNT_CATEGORIES = [
    # Used in Account model to classify general ledger accounts
    ("asset", "Asset"),
    ("liability", "Liability"),
    ("equity", "Equity"),
    ("revenue", "Revenue"),
    ("expense", "Expense"),
]

# Define whether the account normally increases
# on the debit side or credit side
NORMAL_BALANCE = [
    ("debit", "Debit"),
    ("credit", "Credit"),
]

# Assets/Expenses → Debit, Liabilities/Equity/Revenue → Credit.
DEFAULT_NORMAL_BALANCE = {
    "asset": "debit",
    "expense": "debit",
    "liability": "credit",
    "equity": "credit",
    "revenue": "credit",
}

BALANCE_FIELDS = ("current_balance", "version")


class Account(models.Model):
    """
    Ledger account in the Chart of Accounts.
    - code is unique across the chart
    - category: determines reporting (BS vs P&L)
    - normal_balance: fixes the sign of current_balance
    - current_balance: running balance, only ever written by the ledger poster
    - version: bumped on every balance write (optimistic lock check)
    """

    # Every account has a code which sorts/groups accounts in reports
    code = models.CharField(max_length=32, unique=True)
    # Human-readable name → "Cash at Bank", "Accounts Payable".
    name = models.CharField(max_length=200)

    # Classify account into one of the 5 basic accounting types
    category = models.CharField(max_length=10, choices=ACCOUNT_CATEGORIES)

    # Define whether the account normally carries a debit or credit balance
    normal_balance = models.CharField(
        max_length=6,
        choices=NORMAL_BALANCE,
        default="debit",
    )

    # Balance in the account's natural sign
    # (a credit-normal payable with 500 owing holds +500)
    current_balance = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    version = models.PositiveIntegerField(default=0)

    # marker for accounts that balance a whole document type (AP / AR)
    is_control_account = models.BooleanField(default=False)
    # “soft deactivate” accounts (stop new postings) without deleting history
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = AccountManager()

    class Meta:
        ordering = ("code",)
        indexes = [
            # For reports grouped by category
            models.Index(fields=["category"], name="acct_category_idx"),
        ]

    def __str__(self):
        # Example: "2100 – Accounts Payable".
        return f"{self.code} – {self.name}"

    def balance_delta(self, debit_amount, credit_amount):
        """Signed change to current_balance for one ledger row."""
        debit_amount = debit_amount or Decimal("0.00")
        credit_amount = credit_amount or Decimal("0.00")
        if self.normal_balance == "credit":
            return credit_amount - debit_amount
        return debit_amount - credit_amount

    def clean(self):
        if self.normal_balance not in dict(NORMAL_BALANCE):
            raise ValidationError("normal_balance must be 'debit' or 'credit'")

    def save(self, *args, **kwargs):
        """Enforce business immutability
        (can’t disable accounts that already carry ledger rows)"""
        if not self.pk:
            return super().save(*args, **kwargs)
        # Fetch the previous version of account from DB
        old = Account.objects.filter(pk=self.pk).only("is_active").first()

        # If account was active before, but now being set to inactive
        if old and old.is_active and not self.is_active:
            from .ledger import LedgerEntry

            if LedgerEntry.objects.filter(account_id=self.pk).exists():
                raise ValidationError(
                    "Cannot disable an account that has ledger entries."
                )

        # A plain save() never writes the balance columns back;
        # those belong to the ledger poster's versioned UPDATE
        if kwargs.get("update_fields") is None:
            kwargs["update_fields"] = [
                f.name
                for f in self._meta.concrete_fields
                if not f.primary_key and f.name not in BALANCE_FIELDS
            ]
        return super().save(*args, **kwargs)
