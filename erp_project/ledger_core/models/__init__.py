from .account import Account
from .auditlog import AuditLog
from .banking import BankAccount
from .bill import Bill, BillLine
from .credit_note import CreditNote, CreditNoteLine
from .customer import Customer
from .debit_note import DebitNote, DebitNoteLine
from .invoice import Invoice, InvoiceLine
from .journal import JournalEntry, JournalLine
from .ledger import LedgerEntry
from .payment import Payment
from .period import Period
from .tax import TaxCode
from .vendor import Vendor
