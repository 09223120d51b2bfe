"""
Errors raised by the posting engine.

Every class carries a machine-readable ``code`` so callers can translate
it into a user-facing response without string matching. All of them abort
the enclosing transaction; only SerializationConflict is safe to retry.
"""


class LedgerError(Exception):
    """Base class for all posting / ledger errors."""

    code = "LEDGER_ERROR"
    retryable = False


class ConfigurationError(LedgerError):
    """A required control, tax or bank ledger account is not configured."""

    code = "CONFIGURATION_ERROR"


class ImbalancedEntryError(LedgerError):
    """Raised when assembled journal lines fail the double-entry balance check."""

    code = "IMBALANCED_ENTRY"

    def __init__(self, total_debit, total_credit):
        self.total_debit = total_debit
        self.total_credit = total_credit
        super().__init__(
            f"Journal not balanced: debits={total_debit}, credits={total_credit}"
        )


class IllegalTransitionError(LedgerError):
    """The document (or entry) cannot move from its current status on this event."""

    code = "ILLEGAL_TRANSITION"

    def __init__(self, current, event, message=None):
        self.current = current
        self.event = event
        super().__init__(message or f"Cannot {event} a document in status '{current}'")


class AlreadyPostedError(IllegalTransitionError):
    code = "ALREADY_POSTED"


class NotPostedError(IllegalTransitionError):
    code = "NOT_POSTED"


class OverpaymentError(LedgerError):
    """Amount exceeds the outstanding balance of the document."""

    code = "OVERPAYMENT"

    def __init__(self, amount, balance_due):
        self.amount = amount
        self.balance_due = balance_due
        super().__init__(
            f"Payment of {amount} exceeds balance due of {balance_due}"
        )


class NotFoundError(LedgerError):
    code = "NOT_FOUND"


class PeriodClosedError(LedgerError):
    """Entry date falls inside a closed accounting period."""

    code = "PERIOD_CLOSED"


class SerializationConflict(LedgerError):
    """
    Transient: another transaction changed an account balance underneath us
    (stale version) or the database aborted on a serialization failure /
    deadlock. The whole operation can be re-run with the same input.
    """

    code = "SERIALIZATION_CONFLICT"
    retryable = True
