"""
Resolve the control, tax and bank ledger accounts a posting needs.

Account codes come from settings.LEDGER_ACCOUNT_CODES (role -> code) so a
chart with different numbering only needs configuration, not code changes.
A role that is unmapped, missing from the chart or inactive raises
ConfigurationError before anything is written.
"""

from django.conf import settings

from ..exceptions import ConfigurationError
from ..models import Account
from ..models.document import PURCHASE, SALES

CONTROL_ROLES = {
    PURCHASE: "accounts_payable",
    SALES: "accounts_receivable",
}

# Tax legs: input tax is recoverable (asset), output tax is owed (liability)
TAX_ROLE_PREFIX = {
    PURCHASE: "input",
    SALES: "output",
}


def account_code(role):
    try:
        return settings.LEDGER_ACCOUNT_CODES[role]
    except KeyError:
        raise ConfigurationError(f"No account code configured for role '{role}'")


def resolve_account(role):
    code = account_code(role)
    account = Account.objects.active().filter(code=code).first()
    if account is None:
        raise ConfigurationError(
            f"Account {code} ({role}) is missing or inactive in the chart of accounts"
        )
    return account


def control_account_for(document):
    """Counterparty override first, then the configured AP / AR account."""
    override = document.default_control_account()
    if override is not None:
        if not override.is_active:
            raise ConfigurationError(f"Control account {override.code} is inactive")
        return override
    return resolve_account(CONTROL_ROLES[document.SIDE])


def tax_account(side, component):
    # component is one of cgst / sgst / igst / cess
    return resolve_account(f"{TAX_ROLE_PREFIX[side]}_{component}")


def tds_account(receipt=False):
    return resolve_account("tds_receivable" if receipt else "tds_payable")


def bank_ledger_account(bank_account):
    """Return the ledger Account that represents bank_account in the chart of accounts."""
    ledger = bank_account.ledger_account
    if ledger is None:
        raise ConfigurationError(
            f"Bank account '{bank_account.name}' has no linked ledger account"
        )
    if not ledger.is_active:
        raise ConfigurationError(f"Bank ledger account {ledger.code} is inactive")
    return ledger


class DocumentAccounts:
    """
    Accounts for one document posting. Tax accounts are looked up only for
    the components that actually carry an amount, so an intrastate bill never
    needs the IGST account configured.
    """

    def __init__(self, document):
        self.side = document.SIDE
        self.control = control_account_for(document)
        self._tax = {}

    def tax(self, component):
        if component not in self._tax:
            self._tax[component] = tax_account(self.side, component)
        return self._tax[component]
