from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import CommandError, call_command
from django.test import TestCase

from ..models import Account
from ..services.payment import pay_bill
from ..services.posting import post_bill
from ..services.verify import verify_ledger
from ..tasks import verify_ledger_balances
from .helpers import LedgerFixtures

D = Decimal


class VerifyLedgerTests(LedgerFixtures, TestCase):

    def setUp(self):
        super().setUp()
        bill = self.make_bill("1000")
        post_bill(bill.pk)
        pay_bill(bill.pk, D("500"), "cheque", self.bank.pk)

    def test_clean_ledger_has_no_mismatches(self):
        self.assertEqual(verify_ledger(), [])
        self.assertEqual(verify_ledger_balances(), [])

        out = StringIO()
        call_command("verify_ledger", stdout=out)
        self.assertIn("verified", out.getvalue())

    def test_drifted_balance_is_reported(self):
        Account.objects.filter(code="2100").update(current_balance=D("1.00"))

        mismatches = verify_ledger()
        self.assertEqual([m.code for m in mismatches], ["2100"])
        self.assertEqual(mismatches[0].replayed, D("680.00"))
        self.assertEqual(mismatches[0].last_running, D("680.00"))

        self.assertEqual(verify_ledger_balances(codes=["2100"])[0]["stored"], "1.00")
        with self.assertRaises(CommandError):
            call_command("verify_ledger", "--code", "2100", stdout=StringIO())

    def test_filter_by_code(self):
        Account.objects.filter(code="2100").update(current_balance=D("1.00"))
        self.assertEqual(verify_ledger(codes=["5000"]), [])


@pytest.mark.django_db
def test_seed_chart_is_idempotent(settings):
    call_command("seed_chart", stdout=StringIO())
    count = Account.objects.count()
    call_command("seed_chart", stdout=StringIO())

    assert Account.objects.count() == count
    ap = Account.objects.get(code=settings.LEDGER_ACCOUNT_CODES["accounts_payable"])
    assert ap.is_control_account
    assert ap.normal_balance == "credit"
