from django.core.exceptions import ValidationError
from django.db import models


# ---------- Period (accounting period) ----------
class Period(models.Model):  # A time bucket during which postings are grouped

    # Human-readable label for the period
    name = models.CharField(max_length=50, unique=True)  # Example: "2025-07"

    # Define the exact date range of the accounting period
    start_date = models.DateField()
    end_date = models.DateField()

    # Indicate whether the books for this period are closed
    is_closed = models.BooleanField(default=False)
    """
        When is_closed=True:
            No new postings dated inside the range.
            Prevents backdating transactions into finalized books.
    """

    class Meta:
        indexes = [
            models.Index(fields=["start_date"], name="period_start_idx"),
            models.Index(fields=["is_closed"], name="period_closed_idx"),
        ]
        # periods are returned chronologically
        ordering = ("start_date",)

    def __str__(self):
        return self.name

    def clean(self):
        if self.start_date >= self.end_date:
            raise ValidationError("start_date must be before end_date")

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
