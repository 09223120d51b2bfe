from decimal import Decimal

from django.conf import settings
from django.core.management.base import BaseCommand
from django.db import transaction

from ledger_core.models import Account, BankAccount, TaxCode
from ledger_core.models.account import DEFAULT_NORMAL_BALANCE

# role -> (name, category, is_control_account)
ROLE_ACCOUNTS = {
    "accounts_payable": ("Accounts Payable", "liability", True),
    "accounts_receivable": ("Accounts Receivable", "asset", True),
    "input_cgst": ("Input CGST", "asset", False),
    "input_sgst": ("Input SGST", "asset", False),
    "input_igst": ("Input IGST", "asset", False),
    "input_cess": ("Input Cess", "asset", False),
    "output_cgst": ("Output CGST", "liability", False),
    "output_sgst": ("Output SGST", "liability", False),
    "output_igst": ("Output IGST", "liability", False),
    "output_cess": ("Output Cess", "liability", False),
    "tds_payable": ("TDS Payable", "liability", False),
    "tds_receivable": ("TDS Receivable", "asset", False),
}

# code, name, category
OPERATING_ACCOUNTS = [
    ("1100", "Bank", "asset"),
    ("4000", "Sales", "revenue"),
    ("4100", "Sales Returns", "revenue"),
    ("5000", "Purchases", "expense"),
    ("5100", "Purchase Returns", "expense"),
]

# code, composite rate
GST_RATES = [
    ("GST0", Decimal("0")),
    ("GST5", Decimal("5")),
    ("GST12", Decimal("12")),
    ("GST18", Decimal("18")),
    ("GST28", Decimal("28")),
]


class Command(BaseCommand):
    help = "Creates the control, tax and bank accounts and GST tax codes the ledger needs."

    def add_arguments(self, parser):
        parser.add_argument(
            "--no-tax-codes",
            action="store_true",
            help="Only create accounts, skip the standard GST tax codes",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        created = 0

        for role, (name, category, control) in ROLE_ACCOUNTS.items():
            _, was_created = Account.objects.get_or_create(
                code=settings.LEDGER_ACCOUNT_CODES[role],
                defaults={
                    "name": name,
                    "category": category,
                    "normal_balance": DEFAULT_NORMAL_BALANCE[category],
                    "is_control_account": control,
                },
            )
            created += was_created

        for code, name, category in OPERATING_ACCOUNTS:
            _, was_created = Account.objects.get_or_create(
                code=code,
                defaults={
                    "name": name,
                    "category": category,
                    "normal_balance": DEFAULT_NORMAL_BALANCE[category],
                },
            )
            created += was_created

        BankAccount.objects.get_or_create(
            name="Main Bank",
            defaults={"ledger_account": Account.objects.get(code="1100")},
        )

        if not options["no_tax_codes"]:
            for code, rate in GST_RATES:
                TaxCode.objects.get_or_create(
                    code=code,
                    defaults={"rate": rate, "description": f"GST {rate}%"},
                )

        self.stdout.write(self.style.SUCCESS(
            f"Chart seeded ({created} new accounts)."))
