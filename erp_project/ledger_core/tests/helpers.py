import datetime
from decimal import Decimal
from io import StringIO

from django.core.management import call_command

from ..models import (Account, BankAccount, Bill, BillLine, CreditNote,
                      CreditNoteLine, Customer, DebitNote, DebitNoteLine,
                      Invoice, InvoiceLine, TaxCode, Vendor)

LINE_MODELS = {
    Bill: BillLine,
    DebitNote: DebitNoteLine,
    Invoice: InvoiceLine,
    CreditNote: CreditNoteLine,
}

DOC_DATE = datetime.date(2025, 7, 15)


class LedgerFixtures:
    """setUp mixin: default chart, one vendor, one customer, one bank."""

    def setUp(self):
        call_command("seed_chart", stdout=StringIO())
        self.ap = Account.objects.get(code="2100")
        self.ar = Account.objects.get(code="1200")
        self.bank_gl = Account.objects.get(code="1100")
        self.purchases = Account.objects.get(code="5000")
        self.sales = Account.objects.get(code="4000")
        self.bank = BankAccount.objects.get(name="Main Bank")
        self.gst18 = TaxCode.objects.get(code="GST18")
        self.vendor = Vendor.objects.create(name="Acme Supplies")
        self.customer = Customer.objects.create(name="Globex Retail")

    def account(self, code):
        return Account.objects.get(code=code)

    def make_document(self, model, number="DOC-001", lines=None, interstate=False, **header):
        """
        Create a draft document. `lines` is a list of
        (account, quantity, unit_price, tax_code) tuples.
        """
        party = "vendor" if model in (Bill, DebitNote) else "customer"
        header.setdefault(party, self.vendor if party == "vendor" else self.customer)
        doc = model.objects.create(
            number=number,
            date=header.pop("date", DOC_DATE),
            is_interstate=interstate,
            **header,
        )
        for idx, (account, qty, price, tax_code) in enumerate(lines or [], start=1):
            LINE_MODELS[model].objects.create(
                document=doc,
                line_number=idx,
                account=account,
                quantity=Decimal(str(qty)),
                unit_price=Decimal(str(price)),
                tax_code=tax_code,
            )
        doc.refresh_from_db()
        return doc

    def make_bill(self, amount="1000", number="BILL-001", interstate=False, **header):
        return self.make_document(
            Bill, number=number, interstate=interstate,
            lines=[(self.purchases, 1, amount, self.gst18)], **header,
        )

    def make_invoice(self, amount="1000", number="INV-001", interstate=False, **header):
        return self.make_document(
            Invoice, number=number, interstate=interstate,
            lines=[(self.sales, 1, amount, self.gst18)], **header,
        )

    def entry_legs(self, entry):
        """(account code, debit, credit) per journal line, in line order."""
        return [
            (line.account.code, line.debit_amount, line.credit_amount)
            for line in entry.lines.select_related("account").order_by("line_number")
        ]
