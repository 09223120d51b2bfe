from django.db import models

from .customer import Customer
from .document import SALES, SourceDocument, SourceDocumentLine


class Invoice(SourceDocument):  # Represents a customer invoice
    """
    Accounts Receivable document. Mirrors Bill on the sales side:
    posting credits revenue and output tax and debits AR.
    """

    SIDE = SALES
    ENTRY_TYPE = "invoice"
    NUMBER_PREFIX = "JE-INV"
    COUNTERPARTY_FIELD = "customer"

    # prevent deleting customer who has an invoice
    customer = models.ForeignKey(
        Customer, on_delete=models.PROTECT, related_name="invoices"
    )

    class Meta:
        indexes = [
            models.Index(fields=["customer", "status"], name="inv_customer_status_idx"),
        ]
        constraints = [
            # We issue invoice numbers ourselves, so they are globally unique
            models.UniqueConstraint(fields=["number"], name="uq_invoice_number"),
        ]

    def default_control_account(self):
        return self.customer.default_ar_account


class InvoiceLine(SourceDocumentLine):
    document = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name="lines")

    class Meta(SourceDocumentLine.Meta):
        constraints = [
            models.UniqueConstraint(
                fields=["document", "line_number"], name="uq_invoiceline_number"
            ),
        ]
