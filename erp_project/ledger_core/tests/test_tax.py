from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError

from ..models import TaxCode
from ..services.tax import LineTax, component_rates, compute_line, sum_lines


@pytest.fixture
def gst18():
    return TaxCode(code="GST18", rate=Decimal("18"))


def test_intrastate_splits_into_cgst_and_sgst(gst18):
    tax = compute_line(1, "1000", tax_code=gst18, interstate=False)

    assert tax.net_amount == Decimal("1000.00")
    assert tax.cgst_amount == Decimal("90.00")
    assert tax.sgst_amount == Decimal("90.00")
    assert tax.igst_amount == Decimal("0.00")
    assert tax.total_amount == Decimal("1180.00")


def test_interstate_charges_igst_only(gst18):
    tax = compute_line(1, "1000", tax_code=gst18, interstate=True)

    assert tax.cgst_amount == tax.sgst_amount == Decimal("0.00")
    assert tax.igst_amount == Decimal("180.00")
    assert tax.total_amount == Decimal("1180.00")


def test_no_tax_code_means_total_equals_net():
    tax = compute_line("2.5", "40", discount_percent="10")

    assert tax.net_amount == Decimal("90.00")
    assert tax.total_tax == Decimal("0.00")
    assert tax.total_amount == Decimal("90.00")


def test_explicit_component_rates_and_cess_override_defaults():
    code = TaxCode(
        code="GST28C", rate=Decimal("28"),
        cgst_rate=Decimal("14"), sgst_rate=Decimal("14"), cess_rate=Decimal("12"),
    )
    tax = compute_line(1, "500", tax_code=code)

    assert (tax.cgst_amount, tax.sgst_amount, tax.cess_amount) == (
        Decimal("70.00"), Decimal("70.00"), Decimal("60.00"))
    assert tax.total_amount == Decimal("700.00")


def test_components_round_half_up_from_unrounded_net():
    code = TaxCode(code="GST5", rate=Decimal("5"))
    # net 0.3333 * 3 = 0.9999 -> 1.00; 2.5% of 0.9999 = 0.0249975 -> 0.02
    tax = compute_line(3, "0.3333", tax_code=code)

    assert tax.net_amount == Decimal("1.00")
    assert tax.cgst_amount == Decimal("0.02")
    assert tax.total_amount == tax.net_amount + tax.cgst_amount + tax.sgst_amount


def test_component_rates_fallback(gst18):
    assert component_rates(gst18, interstate=False) == (
        Decimal("9.0000"), Decimal("9.0000"), Decimal("0"), Decimal("0"))
    assert component_rates(gst18, interstate=True)[2] == Decimal("18.0000")
    assert component_rates(None, interstate=True) == (Decimal("0"),) * 4


@pytest.mark.parametrize(
    "quantity, price, discount",
    [(-1, "10", 0), (1, "-10", 0), (1, "10", "101"), (1, "10", "-5")],
)
def test_invalid_inputs_are_rejected(quantity, price, discount):
    with pytest.raises(ValidationError):
        compute_line(quantity, price, discount_percent=discount)


def test_sum_lines_adds_rounded_components():
    totals = sum_lines([
        LineTax(net_amount=Decimal("1000.00"), cgst_amount=Decimal("90.00"), sgst_amount=Decimal("90.00")),
        LineTax(net_amount=Decimal("200.00"), igst_amount=Decimal("10.00")),
    ])

    assert totals.subtotal == Decimal("1200.00")
    assert totals.total_tax == Decimal("190.00")
    assert totals.total_amount == Decimal("1390.00")
