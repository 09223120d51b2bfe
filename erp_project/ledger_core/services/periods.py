from ..exceptions import PeriodClosedError
from ..models.period import Period

"""
    Posting date determines the period.
    Dates outside every defined period post without one.
"""


def find_period(date):
    return Period.objects.filter(start_date__lte=date, end_date__gte=date).first()


def resolve_open_period(date):
    """Return the open period containing date (or None); refuse closed ones."""
    period = find_period(date)
    if period is not None and period.is_closed:
        raise PeriodClosedError(f"Accounting period {period.name} is closed for {date}")
    return period
