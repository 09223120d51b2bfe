from django.core.exceptions import ValidationError
from django.db import models

from .account import Account


class Customer(models.Model):  # Buyer side of Accounts Receivable (AR)

    name = models.CharField(max_length=200, unique=True)
    gstin = models.CharField(max_length=15, blank=True, default="")

    # Overrides the default AR control account for this customer
    default_ar_account = models.ForeignKey(
        Account,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="customers_default_ar",
        help_text="Default AR account used for this customer",
    )

    class Meta:
        ordering = ("name",)

    def __str__(self):
        return self.name

    def clean(self):
        dar = self.default_ar_account
        if dar and not dar.is_control_account:
            raise ValidationError(
                "Default AR account must be a control account")
        return super().clean()

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
