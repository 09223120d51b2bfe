from django.db import models


# -----------------------------------------
# Chart of accounts lookups and row locking
# -----------------------------------------
class AccountQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)

    def lock_for_posting(self, account_ids):
        """
        Lock every touched account row until the transaction ends.
        Rows are always locked in ascending id order so two postings that
        share accounts queue up instead of deadlocking.
        """
        return {
            acct.pk: acct
            for acct in self.select_for_update()
            .filter(pk__in=set(account_ids))
            .order_by("pk")
        }


class AccountManager(models.Manager):
    def get_queryset(self):
        return AccountQuerySet(self.model, using=self._db)

    def active(self):
        return self.get_queryset().active()

    def lock_for_posting(self, account_ids):
        return self.get_queryset().lock_for_posting(account_ids)


# -----------------------------------------
# Ledger rows in posting order
# -----------------------------------------
class LedgerEntryQuerySet(models.QuerySet):
    def for_account(self, account):
        # Insertion order is chronological order for an account
        return self.filter(account=account).order_by("pk")


class LedgerEntryManager(models.Manager):
    def get_queryset(self):
        return LedgerEntryQuerySet(self.model, using=self._db)

    def for_account(self, account):
        return self.get_queryset().for_account(account)

