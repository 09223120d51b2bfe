from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class TaxCode(models.Model):
    """
    GST rate definition applied to document lines.

    `rate` is the composite rate (e.g. 18). The component rates are optional:
    when cgst/sgst are blank each defaults to rate / 2, when igst is blank it
    defaults to rate, when cess is blank no cess is charged.
    """

    code = models.CharField(max_length=20, unique=True)  # e.g. "GST18"
    description = models.CharField(max_length=200, blank=True, default="")
    rate = models.DecimalField(max_digits=7, decimal_places=4)
    cgst_rate = models.DecimalField(max_digits=7, decimal_places=4, null=True, blank=True)
    sgst_rate = models.DecimalField(max_digits=7, decimal_places=4, null=True, blank=True)
    igst_rate = models.DecimalField(max_digits=7, decimal_places=4, null=True, blank=True)
    cess_rate = models.DecimalField(max_digits=7, decimal_places=4, null=True, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ("code",)
        constraints = [
            models.CheckConstraint(
                condition=models.Q(rate__gte=0),
                name="taxcode_rate_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.code} ({self.rate}%)"

    def clean(self):
        for field in ("rate", "cgst_rate", "sgst_rate", "igst_rate", "cess_rate"):
            value = getattr(self, field)
            if value is not None and value < Decimal("0"):
                raise ValidationError(f"{field} must be >= 0")

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
