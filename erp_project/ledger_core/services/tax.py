"""
GST apportionment for document lines.

Pure functions: nothing here touches the database, so the same numbers come
out whether a line is being previewed, saved as draft, or re-checked at
posting time.

    net   = quantity * unit_price * (1 - discount_percent / 100)
    intrastate: cgst = net * cgst_rate / 100, sgst = net * sgst_rate / 100
    interstate: igst = net * igst_rate / 100
    cess  = net * cess_rate / 100
    total = net + cgst + sgst + igst + cess

Quantities and rates are carried at 4 decimal places; every monetary output
is rounded half-up to 2 places from the unrounded net, and the line total
is the sum of the rounded parts so documents always add up.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from django.core.exceptions import ValidationError

TWOPLACES = Decimal("0.01")
FOURPLACES = Decimal("0.0001")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def _dec(value, places=FOURPLACES) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    return Decimal(str(value)).quantize(places, rounding=ROUND_HALF_UP)


def money(value) -> Decimal:
    return _dec(value, TWOPLACES)


@dataclass(frozen=True)
class LineTax:
    net_amount: Decimal
    cgst_amount: Decimal = ZERO
    sgst_amount: Decimal = ZERO
    igst_amount: Decimal = ZERO
    cess_amount: Decimal = ZERO

    @property
    def total_tax(self) -> Decimal:
        return self.cgst_amount + self.sgst_amount + self.igst_amount + self.cess_amount

    @property
    def total_amount(self) -> Decimal:
        return self.net_amount + self.total_tax


@dataclass(frozen=True)
class DocumentTotals:
    subtotal: Decimal = ZERO
    cgst_amount: Decimal = ZERO
    sgst_amount: Decimal = ZERO
    igst_amount: Decimal = ZERO
    cess_amount: Decimal = ZERO

    @property
    def total_tax(self) -> Decimal:
        return self.cgst_amount + self.sgst_amount + self.igst_amount + self.cess_amount

    @property
    def total_amount(self) -> Decimal:
        return self.subtotal + self.total_tax


def component_rates(tax_code, interstate: bool):
    """
    Return (cgst, sgst, igst, cess) percentages for a tax code.

    A blank cgst/sgst split falls back to half the composite rate each and a
    blank igst falls back to the composite rate.
    """
    if tax_code is None:
        return (Decimal("0"),) * 4

    rate = _dec(tax_code.rate)
    cess = _dec(getattr(tax_code, "cess_rate", None))
    if interstate:
        igst_rate = getattr(tax_code, "igst_rate", None)
        igst = _dec(igst_rate) if igst_rate is not None else rate
        return Decimal("0"), Decimal("0"), igst, cess

    half = (rate / 2).quantize(FOURPLACES, rounding=ROUND_HALF_UP)
    cgst_rate = getattr(tax_code, "cgst_rate", None)
    sgst_rate = getattr(tax_code, "sgst_rate", None)
    cgst = _dec(cgst_rate) if cgst_rate is not None else half
    sgst = _dec(sgst_rate) if sgst_rate is not None else half
    return cgst, sgst, Decimal("0"), cess


def compute_line(quantity, unit_price, discount_percent=0, tax_code=None,
                 interstate: bool = False) -> LineTax:
    """Net amount and tax breakdown for one document line."""
    quantity = _dec(quantity)
    unit_price = _dec(unit_price)
    discount_percent = _dec(discount_percent)

    if quantity < 0:
        raise ValidationError("Quantity must be >= 0")
    if unit_price < 0:
        raise ValidationError("Unit price must be >= 0")
    if not (0 <= discount_percent <= HUNDRED):
        raise ValidationError("Discount percent must be between 0 and 100")

    # unrounded net; each component is rounded from this
    net = quantity * unit_price * (1 - discount_percent / HUNDRED)
    cgst_rate, sgst_rate, igst_rate, cess_rate = component_rates(tax_code, interstate)

    return LineTax(
        net_amount=money(net),
        cgst_amount=money(net * cgst_rate / HUNDRED),
        sgst_amount=money(net * sgst_rate / HUNDRED),
        igst_amount=money(net * igst_rate / HUNDRED),
        cess_amount=money(net * cess_rate / HUNDRED),
    )


def sum_lines(lines: Iterable) -> DocumentTotals:
    """
    Document-level totals: the plain sum of the (already rounded) line values.
    Accepts LineTax values or saved document lines, which carry the same fields.
    """
    subtotal = cgst = sgst = igst = cess = ZERO
    for line in lines:
        subtotal += line.net_amount
        cgst += line.cgst_amount
        sgst += line.sgst_amount
        igst += line.igst_amount
        cess += line.cess_amount
    return DocumentTotals(
        subtotal=subtotal,
        cgst_amount=cgst,
        sgst_amount=sgst,
        igst_amount=igst,
        cess_amount=cess,
    )


def tax_for_line(line, interstate: Optional[bool] = None) -> LineTax:
    """Run compute_line over a saved or unsaved document line."""
    if interstate is None:
        interstate = line.document.is_interstate
    return compute_line(
        line.quantity,
        line.unit_price,
        line.discount_percent,
        line.tax_code,
        interstate,
    )
