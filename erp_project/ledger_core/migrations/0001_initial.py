import django.db.models.deletion
from decimal import Decimal

from django.conf import settings
from django.db import migrations, models


def money(**kwargs):
    return models.DecimalField(
        decimal_places=2, default=Decimal("0.00"), max_digits=18, **kwargs
    )


def document_fields(kind):
    return [
        ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
        ("number", models.CharField(max_length=64)),
        ("date", models.DateField()),
        ("due_date", models.DateField(blank=True, null=True)),
        ("is_interstate", models.BooleanField(default=False)),
        ("description", models.TextField(blank=True, default="")),
        ("subtotal", money()),
        ("cgst_amount", money()),
        ("sgst_amount", money()),
        ("igst_amount", money()),
        ("cess_amount", money()),
        ("total_tax", money()),
        ("total_amount", money()),
        ("amount_paid", money()),
        ("balance_due", money()),
        ("status", models.CharField(
            choices=[("draft", "Draft"), ("posted", "Posted"), ("partial", "Partially paid"),
                     ("paid", "Paid"), ("applied", "Applied"), ("void", "Void")],
            default="draft", max_length=10)),
        ("posted_at", models.DateTimeField(blank=True, null=True)),
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
        ("journal_entry", models.OneToOneField(
            blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
            related_name=f"{kind}_document", to="ledger_core.journalentry")),
    ]


def line_fields(document_model):
    return [
        ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
        ("line_number", models.PositiveIntegerField(default=1)),
        ("description", models.CharField(blank=True, default="", max_length=400)),
        ("quantity", models.DecimalField(decimal_places=4, default=Decimal("1"), max_digits=14)),
        ("unit_price", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=18)),
        ("discount_percent", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=7)),
        ("net_amount", money()),
        ("cgst_amount", money()),
        ("sgst_amount", money()),
        ("igst_amount", money()),
        ("cess_amount", money()),
        ("total_amount", money()),
        ("account", models.ForeignKey(
            on_delete=django.db.models.deletion.PROTECT, related_name="+",
            to="ledger_core.account")),
        ("tax_code", models.ForeignKey(
            blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
            related_name="+", to="ledger_core.taxcode")),
        ("document", models.ForeignKey(
            on_delete=django.db.models.deletion.CASCADE, related_name="lines",
            to=f"ledger_core.{document_model}")),
    ]


def line_options(name):
    return {
        "ordering": ("document", "line_number"),
        "abstract": False,
        "constraints": [
            models.UniqueConstraint(fields=("document", "line_number"), name=name),
        ],
    }


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=32, unique=True)),
                ("name", models.CharField(max_length=200)),
                ("category", models.CharField(
                    choices=[("asset", "Asset"), ("liability", "Liability"), ("equity", "Equity"),
                             ("revenue", "Revenue"), ("expense", "Expense")],
                    max_length=10)),
                ("normal_balance", models.CharField(
                    choices=[("debit", "Debit"), ("credit", "Credit")], default="debit", max_length=6)),
                ("current_balance", money()),
                ("version", models.PositiveIntegerField(default=0)),
                ("is_control_account", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ("code",),
                "indexes": [models.Index(fields=["category"], name="acct_category_idx")],
            },
        ),
        migrations.CreateModel(
            name="TaxCode",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=20, unique=True)),
                ("description", models.CharField(blank=True, default="", max_length=200)),
                ("rate", models.DecimalField(decimal_places=4, max_digits=7)),
                ("cgst_rate", models.DecimalField(blank=True, decimal_places=4, max_digits=7, null=True)),
                ("sgst_rate", models.DecimalField(blank=True, decimal_places=4, max_digits=7, null=True)),
                ("igst_rate", models.DecimalField(blank=True, decimal_places=4, max_digits=7, null=True)),
                ("cess_rate", models.DecimalField(blank=True, decimal_places=4, max_digits=7, null=True)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "ordering": ("code",),
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("rate__gte", 0)), name="taxcode_rate_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Period",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=50, unique=True)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("is_closed", models.BooleanField(default=False)),
            ],
            options={
                "ordering": ("start_date",),
                "indexes": [
                    models.Index(fields=["start_date"], name="period_start_idx"),
                    models.Index(fields=["is_closed"], name="period_closed_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Vendor",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200, unique=True)),
                ("gstin", models.CharField(blank=True, default="", max_length=15)),
                ("default_ap_account", models.ForeignKey(
                    blank=True, help_text="Default AP account used for this vendor", null=True,
                    on_delete=django.db.models.deletion.SET_NULL, related_name="vendors_default_ap",
                    to="ledger_core.account")),
            ],
            options={"ordering": ("name",)},
        ),
        migrations.CreateModel(
            name="Customer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200, unique=True)),
                ("gstin", models.CharField(blank=True, default="", max_length=15)),
                ("default_ar_account", models.ForeignKey(
                    blank=True, help_text="Default AR account used for this customer", null=True,
                    on_delete=django.db.models.deletion.SET_NULL, related_name="customers_default_ar",
                    to="ledger_core.account")),
            ],
            options={"ordering": ("name",)},
        ),
        migrations.CreateModel(
            name="BankAccount",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200, unique=True)),
                ("account_number_masked", models.CharField(blank=True, default="", max_length=50)),
                ("ledger_account", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name="bank_accounts", to="ledger_core.account")),
            ],
        ),
        migrations.CreateModel(
            name="JournalEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("number", models.CharField(max_length=64, unique=True)),
                ("date", models.DateField()),
                ("entry_type", models.CharField(
                    choices=[("bill", "Vendor bill"), ("debit_note", "Debit note"),
                             ("payment", "Vendor payment"), ("invoice", "Customer invoice"),
                             ("credit_note", "Credit note"), ("receipt", "Customer receipt")],
                    max_length=20)),
                ("description", models.TextField(blank=True, default="")),
                ("status", models.CharField(
                    choices=[("draft", "Draft"), ("posted", "Posted")],
                    default="draft", max_length=10)),
                ("total_debit", money()),
                ("total_credit", money()),
                ("posted_at", models.DateTimeField(blank=True, null=True)),
                ("source_type", models.CharField(blank=True, default="", max_length=50)),
                ("source_id", models.BigIntegerField(blank=True, null=True)),
                ("created_by", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    to=settings.AUTH_USER_MODEL)),
                ("period", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    to="ledger_core.period")),
            ],
            options={
                "verbose_name_plural": "journal entries",
                "indexes": [
                    models.Index(fields=["date"], name="je_date_idx"),
                    models.Index(fields=["status"], name="je_status_idx"),
                    models.Index(fields=["source_type", "source_id"], name="je_source_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("line_number", models.PositiveIntegerField()),
                ("description", models.CharField(blank=True, default="", max_length=400)),
                ("debit_amount", money()),
                ("credit_amount", money()),
                ("account", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name="journal_lines",
                    to="ledger_core.account")),
                ("entry", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name="lines",
                    to="ledger_core.journalentry")),
            ],
            options={
                "ordering": ("entry", "line_number"),
                "constraints": [
                    models.UniqueConstraint(fields=("entry", "line_number"), name="uq_jl_entry_line_number"),
                    models.CheckConstraint(
                        condition=models.Q(("debit_amount__gte", 0), ("credit_amount__gte", 0)),
                        name="jl_non_negative_amounts"),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("debit_amount", 0), ("credit_amount__gt", 0)),
                            models.Q(("debit_amount__gt", 0), ("credit_amount", 0)),
                            _connector="OR"),
                        name="jl_debit_xor_credit"),
                ],
            },
        ),
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                ("description", models.CharField(blank=True, default="", max_length=400)),
                ("debit_amount", money()),
                ("credit_amount", money()),
                ("running_balance", models.DecimalField(decimal_places=2, max_digits=18)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("account", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name="ledger_entries",
                    to="ledger_core.account")),
                ("entry", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name="ledger_entries",
                    to="ledger_core.journalentry")),
                ("line", models.OneToOneField(
                    on_delete=django.db.models.deletion.PROTECT, related_name="ledger_entry",
                    to="ledger_core.journalline")),
            ],
            options={
                "ordering": ("account", "pk"),
                "verbose_name_plural": "ledger entries",
                "indexes": [models.Index(fields=["account", "date"], name="le_account_date_idx")],
            },
        ),
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action", models.CharField(max_length=50)),
                ("object_type", models.CharField(max_length=100)),
                ("object_id", models.CharField(max_length=100)),
                ("changes", models.JSONField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("user", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "indexes": [
                    models.Index(fields=["object_type", "object_id"], name="audit_object_idx"),
                    models.Index(fields=["created_at"], name="audit_created_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Bill",
            fields=document_fields("bill") + [
                ("vendor", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name="bills",
                    to="ledger_core.vendor")),
            ],
            options={
                "indexes": [models.Index(fields=["vendor", "status"], name="bill_vendor_status_idx")],
                "constraints": [
                    models.UniqueConstraint(fields=("vendor", "number"), name="uq_bill_vendor_number"),
                ],
            },
        ),
        migrations.CreateModel(
            name="BillLine",
            fields=line_fields("bill"),
            options=line_options("uq_billline_number"),
        ),
        migrations.CreateModel(
            name="Invoice",
            fields=document_fields("invoice") + [
                ("customer", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name="invoices",
                    to="ledger_core.customer")),
            ],
            options={
                "indexes": [models.Index(fields=["customer", "status"], name="inv_customer_status_idx")],
                "constraints": [
                    models.UniqueConstraint(fields=("number",), name="uq_invoice_number"),
                ],
            },
        ),
        migrations.CreateModel(
            name="InvoiceLine",
            fields=line_fields("invoice"),
            options=line_options("uq_invoiceline_number"),
        ),
        migrations.CreateModel(
            name="DebitNote",
            fields=document_fields("debitnote") + [
                ("applied_amount", money()),
                ("vendor", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name="debit_notes",
                    to="ledger_core.vendor")),
                ("original_document", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name="debit_notes", to="ledger_core.bill")),
                ("applied_to", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name="applied_debit_notes", to="ledger_core.bill")),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("vendor", "number"), name="uq_debitnote_vendor_number"),
                ],
            },
        ),
        migrations.CreateModel(
            name="DebitNoteLine",
            fields=line_fields("debitnote"),
            options=line_options("uq_debitnoteline_number"),
        ),
        migrations.CreateModel(
            name="CreditNote",
            fields=document_fields("creditnote") + [
                ("applied_amount", money()),
                ("customer", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name="credit_notes",
                    to="ledger_core.customer")),
                ("original_document", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name="credit_notes", to="ledger_core.invoice")),
                ("applied_to", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name="applied_credit_notes", to="ledger_core.invoice")),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("number",), name="uq_creditnote_number"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CreditNoteLine",
            fields=line_fields("creditnote"),
            options=line_options("uq_creditnoteline_number"),
        ),
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("payment_date", models.DateField()),
                ("amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("method", models.CharField(
                    choices=[("cash", "Cash"), ("cheque", "Cheque"), ("bank_transfer", "Bank Transfer"),
                             ("card", "Card"), ("upi", "UPI"), ("other", "Other")],
                    default="bank_transfer", max_length=20)),
                ("tds_amount", money()),
                ("tds_section", models.CharField(blank=True, default="", max_length=20)),
                ("reference", models.CharField(blank=True, default="", max_length=100)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("bank_account", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name="payments",
                    to="ledger_core.bankaccount")),
                ("bill", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name="payments", to="ledger_core.bill")),
                ("invoice", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name="payments", to="ledger_core.invoice")),
                ("journal_entry", models.OneToOneField(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name="payment", to="ledger_core.journalentry")),
            ],
            options={
                "ordering": ("payment_date", "pk"),
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("bill__isnull", False), ("invoice__isnull", True)),
                            models.Q(("bill__isnull", True), ("invoice__isnull", False)),
                            _connector="OR"),
                        name="payment_exactly_one_document"),
                    models.CheckConstraint(condition=models.Q(("amount__gt", 0)), name="payment_amount_positive"),
                    models.CheckConstraint(
                        condition=models.Q(("tds_amount__gte", 0), ("tds_amount__lte", models.F("amount"))),
                        name="payment_tds_within_amount"),
                ],
            },
        ),
    ]
