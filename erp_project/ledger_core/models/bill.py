from django.db import models

from .document import PURCHASE, SourceDocument, SourceDocumentLine
from .vendor import Vendor


# ---------- Bills / BillLines ----------

# Header represents vendor bill (Accounts Payable document)
class Bill(SourceDocument):
    SIDE = PURCHASE
    ENTRY_TYPE = "bill"
    NUMBER_PREFIX = "JE-BILL"
    COUNTERPARTY_FIELD = "vendor"

    # prevent deleting vendor who has a bill
    vendor = models.ForeignKey(Vendor, on_delete=models.PROTECT, related_name="bills")

    class Meta:
        # Optimize queries for "all bills for this vendor"
        indexes = [
            models.Index(fields=["vendor", "status"], name="bill_vendor_status_idx"),
        ]
        constraints = [
            # Vendor's own bill numbers are unique per vendor,
            # different vendors may reuse them
            models.UniqueConstraint(
                fields=["vendor", "number"], name="uq_bill_vendor_number"
            ),
        ]

    def default_control_account(self):
        return self.vendor.default_ap_account


class BillLine(SourceDocumentLine):
    """Individual item/service on a bill, posted to an expense or asset account."""

    document = models.ForeignKey(Bill, on_delete=models.CASCADE, related_name="lines")

    class Meta(SourceDocumentLine.Meta):
        constraints = [
            models.UniqueConstraint(
                fields=["document", "line_number"], name="uq_billline_number"
            ),
        ]
