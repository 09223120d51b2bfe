from django.core.exceptions import ValidationError
from django.db import models

from .account import Account


class Vendor(models.Model):  # Supplier side of Accounts Payable (AP)

    name = models.CharField(max_length=200, unique=True)
    gstin = models.CharField(max_length=15, blank=True, default="")

    # FK to the Accounts Payable account in Chart of Accounts
    """ If set: bills and payments for this vendor
    book the control leg to this account instead of the default AP. """
    default_ap_account = models.ForeignKey(
        Account,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="vendors_default_ap",
        help_text="Default AP account used for this vendor",
    )

    class Meta:
        ordering = ("name",)

    def __str__(self):
        return self.name

    def clean(self):
        # Only control accounts can be set as default AP (Vendor)
        dap = self.default_ap_account
        if dap and not dap.is_control_account:
            raise ValidationError(
                "Default AP account must be a control account")
        return super().clean()

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
