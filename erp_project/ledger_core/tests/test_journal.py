from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.test import TestCase

from ..exceptions import ConfigurationError, ImbalancedEntryError
from ..models import (Account, Bill, CreditNote, DebitNote, Invoice, JournalEntry,
                      JournalLine, TaxCode)
from ..services.accounts import DocumentAccounts
from ..services.journal import (LineSpec, assert_balanced, build_document_lines,
                                build_settlement_lines, create_journal_entry,
                                credit, debit)
from ..services.posting import post_bill, post_invoice
from .helpers import DOC_DATE, LedgerFixtures

D = Decimal


class DocumentLegTests(LedgerFixtures, TestCase):

    def legs(self, document):
        return [
            (leg.account.code, leg.debit_amount, leg.credit_amount)
            for leg in build_document_lines(document, DocumentAccounts(document))
        ]

    def test_bill_debits_lines_and_input_tax_and_credits_ap(self):
        bill = self.make_bill("1000")
        self.assertEqual(self.legs(bill), [
            ("5000", D("1000.00"), D("0")),
            ("1500", D("90.00"), D("0")),
            ("1501", D("90.00"), D("0")),
            ("2100", D("0"), D("1180.00")),
        ])

    def test_interstate_bill_uses_igst_account(self):
        bill = self.make_bill("1000", interstate=True)
        self.assertEqual(self.legs(bill), [
            ("5000", D("1000.00"), D("0")),
            ("1502", D("180.00"), D("0")),
            ("2100", D("0"), D("1180.00")),
        ])

    def test_lines_sharing_an_account_are_aggregated_in_first_seen_order(self):
        returns = self.account("5100")
        bill = self.make_document(Bill, lines=[
            (self.purchases, 2, "100", None),
            (returns, 1, "50", None),
            (self.purchases, 1, "300", None),
        ])
        self.assertEqual(self.legs(bill), [
            ("5000", D("500.00"), D("0")),
            ("5100", D("50.00"), D("0")),
            ("2100", D("0"), D("550.00")),
        ])

    def test_debit_note_reverses_the_bill_shape(self):
        note = self.make_document(DebitNote, number="DN-1", lines=[(self.purchases, 1, "100", self.gst18)])
        self.assertEqual(self.legs(note), [
            ("5000", D("0"), D("100.00")),
            ("1500", D("0"), D("9.00")),
            ("1501", D("0"), D("9.00")),
            ("2100", D("118.00"), D("0")),
        ])

    def test_invoice_credits_revenue_and_output_tax_and_debits_ar(self):
        invoice = self.make_invoice("1000")
        self.assertEqual(self.legs(invoice), [
            ("4000", D("0"), D("1000.00")),
            ("2200", D("0"), D("90.00")),
            ("2201", D("0"), D("90.00")),
            ("1200", D("1180.00"), D("0")),
        ])

    def test_credit_note_debits_returns_and_credits_ar(self):
        returns = self.account("4100")
        note = self.make_document(CreditNote, number="CN-1", lines=[(returns, 1, "200", self.gst18)])
        self.assertEqual(self.legs(note), [
            ("4100", D("200.00"), D("0")),
            ("2200", D("18.00"), D("0")),
            ("2201", D("18.00"), D("0")),
            ("1200", D("0"), D("236.00")),
        ])

    def test_vendor_default_ap_account_overrides_configured_control(self):
        import_ap = Account.objects.create(
            code="2110", name="AP - Imports", category="liability",
            normal_balance="credit", is_control_account=True,
        )
        self.vendor.default_ap_account = import_ap
        self.vendor.save()
        bill = self.make_bill("100")
        self.assertEqual(self.legs(bill)[-1], ("2110", D("0"), D("118.00")))

    def test_missing_tax_account_is_a_configuration_error(self):
        self.account("1500").delete()
        bill = self.make_bill("1000")
        with self.assertRaises(ConfigurationError):
            build_document_lines(bill, DocumentAccounts(bill))

    def test_invoice_lookup_needs_output_accounts_only(self):
        # input accounts are irrelevant for a sales document
        for code in ("1500", "1501", "1502"):
            self.account(code).delete()
        invoice = self.make_invoice("50")
        self.assertEqual(len(self.legs(invoice)), 4)


    def test_bill_cess_goes_to_input_cess_account(self):
        gst28c = TaxCode.objects.create(code="GST28C", rate=D("28"), cess_rate=D("12"))
        bill = self.make_document(Bill, lines=[(self.purchases, 1, "1000", gst28c)])
        legs = build_document_lines(bill, DocumentAccounts(bill))
        self.assertEqual(
            [(leg.account.code, leg.debit_amount, leg.credit_amount) for leg in legs],
            [("5000", D("1000.00"), D("0")),
             ("1500", D("140.00"), D("0")),
             ("1501", D("140.00"), D("0")),
             ("1503", D("120.00"), D("0")),
             ("2100", D("0"), D("1400.00"))],
        )
        self.assertEqual(assert_balanced(legs), (D("1400.00"), D("1400.00")))

    def test_invoice_cess_goes_to_output_cess_account(self):
        gst28c = TaxCode.objects.create(code="GST28C", rate=D("28"), cess_rate=D("12"))
        invoice = self.make_document(Invoice, lines=[(self.sales, 1, "1000", gst28c)])
        self.assertEqual(self.legs(invoice), [
            ("4000", D("0"), D("1000.00")),
            ("2200", D("0"), D("140.00")),
            ("2201", D("0"), D("140.00")),
            ("2203", D("0"), D("120.00")),
            ("1200", D("1400.00"), D("0")),
        ])

    def test_inactive_cess_account_is_a_configuration_error(self):
        gst28c = TaxCode.objects.create(code="GST28C", rate=D("28"), cess_rate=D("12"))
        Account.objects.filter(code="1503").update(is_active=False)
        bill = self.make_document(Bill, lines=[(self.purchases, 1, "1000", gst28c)])
        with self.assertRaises(ConfigurationError):
            build_document_lines(bill, DocumentAccounts(bill))


class CessPostingTests(LedgerFixtures, TestCase):

    def setUp(self):
        super().setUp()
        self.gst28c = TaxCode.objects.create(code="GST28C", rate=D("28"), cess_rate=D("12"))

    def test_posted_bill_with_cess_balances(self):
        bill = self.make_document(Bill, lines=[(self.purchases, 1, "1000", self.gst28c)])
        entry = JournalEntry.objects.get(pk=post_bill(bill.pk).journal_entry_id)

        self.assertEqual(entry.total_debit, D("1400.00"))
        self.assertEqual(entry.total_credit, D("1400.00"))
        self.assertTrue(entry.is_balanced())
        self.assertIn(("1503", D("120.00"), D("0.00")), self.entry_legs(entry))
        self.assertEqual(self.account("1503").current_balance, D("120.00"))
        self.assertEqual(self.account("2100").current_balance, D("1400.00"))

    def test_posted_invoice_with_cess_balances(self):
        invoice = self.make_document(Invoice, lines=[(self.sales, 1, "1000", self.gst28c)])
        entry = JournalEntry.objects.get(pk=post_invoice(invoice.pk).journal_entry_id)

        self.assertTrue(entry.is_balanced())
        self.assertIn(("2203", D("0.00"), D("120.00")), self.entry_legs(entry))
        self.assertEqual(self.account("2203").current_balance, D("120.00"))
        self.assertEqual(self.account("1200").current_balance, D("1400.00"))

    def test_inactive_cess_account_leaves_bill_in_draft(self):
        Account.objects.filter(code="1503").update(is_active=False)
        bill = self.make_document(Bill, lines=[(self.purchases, 1, "1000", self.gst28c)])
        with self.assertRaises(ConfigurationError):
            post_bill(bill.pk)

        bill.refresh_from_db()
        self.assertEqual(bill.status, "draft")
        self.assertFalse(JournalEntry.objects.exists())


class SettlementLegTests(LedgerFixtures, TestCase):

    def test_vendor_payment_with_tds(self):
        legs = build_settlement_lines(
            amount=D("1180.00"), tds_amount=D("18.00"),
            bank_account=self.bank_gl, control_account=self.ap,
            tds_account=self.account("2310"),
        )
        self.assertEqual(
            [(leg.account.code, leg.debit_amount, leg.credit_amount) for leg in legs],
            [("2100", D("1180.00"), D("0")),
             ("1100", D("0"), D("1162.00")),
             ("2310", D("0"), D("18.00"))],
        )
        assert_balanced(legs)

    def test_receipt_without_tds_omits_the_tds_leg(self):
        legs = build_settlement_lines(
            amount=D("500.00"), tds_amount=D("0.00"),
            bank_account=self.bank_gl, control_account=self.ar, receipt=True,
        )
        self.assertEqual(
            [(leg.account.code, leg.debit_amount, leg.credit_amount) for leg in legs],
            [("1100", D("500.00"), D("0")), ("1200", D("0"), D("500.00"))],
        )

    def test_fully_withheld_payment_drops_the_zero_bank_leg(self):
        legs = build_settlement_lines(
            amount=D("10.00"), tds_amount=D("10.00"),
            bank_account=self.bank_gl, control_account=self.ap,
            tds_account=self.account("2310"),
        )
        self.assertEqual([leg.account.code for leg in legs], ["2100", "2310"])


class CreateJournalEntryTests(LedgerFixtures, TestCase):

    def test_persists_numbered_draft_with_totals(self):
        entry = create_journal_entry(
            number="JE-TEST-1", date=DOC_DATE, entry_type="bill",
            lines=[debit(self.purchases, D("100.00")), credit(self.ap, D("100.00"))],
        )
        self.assertEqual(entry.status, "draft")
        self.assertEqual(entry.total_debit, D("100.00"))
        self.assertEqual(entry.total_credit, D("100.00"))
        self.assertEqual(
            list(entry.lines.values_list("line_number", flat=True)), [1, 2])
        self.assertTrue(entry.is_balanced())

    def test_imbalanced_lines_write_nothing(self):
        with self.assertRaises(ImbalancedEntryError) as ctx:
            create_journal_entry(
                number="JE-BAD", date=DOC_DATE, entry_type="bill",
                lines=[debit(self.purchases, D("100.00")), credit(self.ap, D("99.00"))],
            )
        self.assertEqual(ctx.exception.total_debit, D("100.00"))
        self.assertFalse(JournalEntry.objects.exists())
        self.assertFalse(JournalLine.objects.exists())

    def test_line_must_carry_exactly_one_side(self):
        entry = create_journal_entry(
            number="JE-TEST-2", date=DOC_DATE, entry_type="bill",
            lines=[debit(self.purchases, D("5.00")), credit(self.ap, D("5.00"))],
        )
        with self.assertRaises(ValidationError):
            JournalLine.objects.create(
                entry=entry, line_number=3, account=self.ap,
                debit_amount=D("1.00"), credit_amount=D("1.00"),
            )
        with self.assertRaises(ValidationError):
            JournalLine.objects.create(entry=entry, line_number=3, account=self.ap)


def test_assert_balanced_rejects_an_empty_entry():
    with pytest.raises(ImbalancedEntryError):
        assert_balanced([])


def test_assert_balanced_tolerates_sub_minor_unit_noise():
    lines = [
        LineSpec(account=None, debit_amount=D("10.00005")),
        LineSpec(account=None, credit_amount=D("10.00")),
    ]
    assert assert_balanced(lines) == (D("10.00005"), D("10.00"))
