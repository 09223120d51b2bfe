from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from ..exceptions import IllegalTransitionError, NotFoundError, NotPostedError
from ..models import (AuditLog, Bill, CreditNote, DebitNote, Invoice,
                      JournalEntry, Vendor)
from ..services.payment import (apply_credit_note, apply_debit_note,
                                pay_bill, receive_payment)
from ..services.posting import (post_bill, post_credit_note, post_debit_note,
                                post_invoice)
from .helpers import LedgerFixtures

D = Decimal


class InvoiceReceiptTests(LedgerFixtures, TestCase):

    def setUp(self):
        super().setUp()
        self.invoice = self.make_invoice("1000")

    def test_post_invoice_credits_revenue_and_output_tax(self):
        result = post_invoice(self.invoice.pk)

        entry = JournalEntry.objects.get(pk=result.journal_entry_id)
        self.assertEqual(entry.entry_type, "invoice")
        self.assertEqual(self.entry_legs(entry), [
            ("4000", D("0.00"), D("1000.00")),
            ("2200", D("0.00"), D("90.00")),
            ("2201", D("0.00"), D("90.00")),
            ("1200", D("1180.00"), D("0.00")),
        ])
        self.assertEqual(self.account("1200").current_balance, D("1180.00"))
        self.assertEqual(self.account("4000").current_balance, D("1000.00"))

    def test_receipt_with_tds_debits_bank_and_tds_receivable(self):
        post_invoice(self.invoice.pk)
        result = receive_payment(
            self.invoice.pk, D("1180"), "upi", self.bank.pk, tds_amount=D("10"))

        self.assertEqual(result.status, "paid")
        entry = JournalEntry.objects.get(pk=result.journal_entry_id)
        self.assertEqual(entry.entry_type, "receipt")
        self.assertEqual(self.entry_legs(entry), [
            ("1100", D("1170.00"), D("0.00")),
            ("1510", D("10.00"), D("0.00")),
            ("1200", D("0.00"), D("1180.00")),
        ])
        self.assertEqual(self.account("1200").current_balance, D("0.00"))
        self.assertTrue(AuditLog.objects.filter(action="receive").exists())


class DebitNoteTests(LedgerFixtures, TestCase):

    def setUp(self):
        super().setUp()
        self.bill = self.make_bill("1000")
        post_bill(self.bill.pk)
        self.note = self.make_document(
            DebitNote, number="DN-001", original_document=self.bill,
            lines=[(self.purchases, 1, "200", self.gst18)],
        )

    def test_post_debit_note_reduces_ap(self):
        result = post_debit_note(self.note.pk)

        self.assertEqual(result.status, "posted")
        entry = JournalEntry.objects.get(pk=result.journal_entry_id)
        self.assertEqual(self.entry_legs(entry), [
            ("5000", D("0.00"), D("200.00")),
            ("1500", D("0.00"), D("18.00")),
            ("1501", D("0.00"), D("18.00")),
            ("2100", D("236.00"), D("0.00")),
        ])
        self.assertEqual(self.account("2100").current_balance, D("944.00"))

    def test_apply_reduces_bill_balance_without_new_entry(self):
        post_debit_note(self.note.pk)
        entries = JournalEntry.objects.count()

        result = apply_debit_note(self.note.pk, self.bill.pk)

        self.assertEqual(result.applied_amount, D("236.00"))
        self.assertEqual(result.new_balance_due, D("944.00"))
        self.assertEqual(JournalEntry.objects.count(), entries)

        self.bill.refresh_from_db()
        self.note.refresh_from_db()
        self.assertEqual(self.bill.status, "partial")
        self.assertEqual(self.bill.balance_due, D("944.00"))
        self.assertEqual(self.note.status, "applied")
        self.assertEqual(self.note.applied_to, self.bill)
        self.assertEqual(self.note.applied_amount, D("236.00"))

    def test_applied_amount_is_capped_at_balance_due(self):
        pay_bill(self.bill.pk, D("1000"), "cash", self.bank.pk)
        post_debit_note(self.note.pk)

        result = apply_debit_note(self.note.pk, self.bill.pk)

        self.assertEqual(result.applied_amount, D("180.00"))
        self.assertEqual(result.new_balance_due, D("0.00"))
        self.bill.refresh_from_db()
        self.assertEqual(self.bill.status, "paid")

    def test_draft_note_cannot_be_applied(self):
        with self.assertRaises(NotPostedError):
            apply_debit_note(self.note.pk, self.bill.pk)

    def test_note_is_applied_once(self):
        post_debit_note(self.note.pk)
        apply_debit_note(self.note.pk, self.bill.pk)
        with self.assertRaises(IllegalTransitionError):
            apply_debit_note(self.note.pk, self.bill.pk)

    def test_missing_target(self):
        post_debit_note(self.note.pk)
        with self.assertRaises(NotFoundError):
            apply_debit_note(self.note.pk, 999999)
        self.note.refresh_from_db()
        self.assertEqual(self.note.status, "posted")

    def test_target_must_be_posted(self):
        post_debit_note(self.note.pk)
        draft = self.make_bill("10", number="BILL-DRAFT")
        with self.assertRaises(NotPostedError):
            apply_debit_note(self.note.pk, draft.pk)

    def test_target_must_belong_to_the_same_vendor(self):
        other = Vendor.objects.create(name="Other Vendor")
        bill = self.make_bill("10", number="BILL-OTHER", vendor=other)
        post_bill(bill.pk)
        post_debit_note(self.note.pk)
        with self.assertRaises(ValidationError):
            apply_debit_note(self.note.pk, bill.pk)


class CreditNoteTests(LedgerFixtures, TestCase):

    def test_credit_note_posts_and_applies_against_invoice(self):
        invoice = self.make_invoice("1000")
        post_invoice(invoice.pk)
        note = self.make_document(
            CreditNote, number="CN-001", original_document=invoice,
            lines=[(self.account("4100"), 1, "100", self.gst18)],
        )

        posted = post_credit_note(note.pk)
        entry = JournalEntry.objects.get(pk=posted.journal_entry_id)
        self.assertEqual(self.entry_legs(entry)[-1], ("1200", D("0.00"), D("118.00")))
        self.assertEqual(self.account("1200").current_balance, D("1062.00"))

        result = apply_credit_note(note.pk, invoice.pk)
        self.assertEqual(result.applied_amount, D("118.00"))
        self.assertEqual(result.new_balance_due, D("1062.00"))
        self.assertEqual(Invoice.objects.get(pk=invoice.pk).status, "partial")
        self.assertEqual(CreditNote.objects.get(pk=note.pk).status, "applied")

    def test_apply_to_unknown_invoice(self):
        note = self.make_document(
            CreditNote, number="CN-002", lines=[(self.account("4100"), 1, "10", None)])
        post_credit_note(note.pk)
        with self.assertRaises(NotFoundError):
            apply_credit_note(note.pk, 31337)

    def test_bill_and_invoice_numbers_are_independent(self):
        self.make_bill("1", number="X-1")
        self.make_invoice("1", number="X-1")
        self.assertEqual(Bill.objects.count(), Invoice.objects.count())
