"""
Project settings for the posting and ledger engine.

Everything environment-specific is read through django-environ:
- DATABASE_URL selects the database (sqlite file by default)
- LEDGER_<ROLE>_CODE overrides which chart-of-accounts code plays a role
  (e.g. LEDGER_ACCOUNTS_PAYABLE_CODE=2100)
"""

from __future__ import annotations

from pathlib import Path

import environ

# -----------------------------------------
# BASE DIRECTORY
# -----------------------------------------
BASE_DIR = Path(__file__).resolve().parent.parent

# -----------------------------------------
# ENV (django-environ)
# -----------------------------------------
env = environ.Env(
    DEBUG=(bool, True),
    SECRET_KEY=(str, ""),
    TIME_ZONE=(str, "UTC"),
    ALLOWED_HOSTS=(list, ["localhost", "127.0.0.1"]),
    DATABASE_URL=(str, f"sqlite:///{BASE_DIR / 'db.sqlite3'}"),
    LOG_LEVEL=(str, "INFO"),
    CELERY_BROKER_URL=(str, "memory://"),
    CELERY_TASK_ALWAYS_EAGER=(bool, False),
    LEDGER_POSTING_RETRIES=(int, 3),
)

# -----------------------------------------
# LOAD .env
# -----------------------------------------
env_file = BASE_DIR / ".env"
if env_file.exists():
    env.read_env(str(env_file))

# -----------------------------------------
# CORE SECURITY
# -----------------------------------------
SECRET_KEY = (env("SECRET_KEY") or "dev-insecure-change-me").strip()
DEBUG = env.bool("DEBUG")
ALLOWED_HOSTS = env.list("ALLOWED_HOSTS")

# -----------------------------------------
# I18N / TZ
# -----------------------------------------
LANGUAGE_CODE = "en-us"
TIME_ZONE = (env("TIME_ZONE") or "UTC").strip()
USE_I18N = True
USE_TZ = True

# -----------------------------------------
# INSTALLED APPS
# -----------------------------------------
INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "ledger_core.apps.LedgerCoreConfig",
]

MIDDLEWARE = []

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# -----------------------------------------
# DATABASE
# -----------------------------------------
DATABASES = {
    "default": env.db("DATABASE_URL"),
}

# -----------------------------------------
# CELERY (read by erp_project/celery.py, CELERY_ namespace)
# -----------------------------------------
CELERY_BROKER_URL = env("CELERY_BROKER_URL")
CELERY_TASK_ALWAYS_EAGER = env.bool("CELERY_TASK_ALWAYS_EAGER")
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_ACCEPT_CONTENT = ["json"]

# -----------------------------------------
# LEDGER ENGINE
# -----------------------------------------
# Role -> account code in the chart of accounts.
# Control accounts balance every document of their side,
# tax accounts receive the GST / cess legs, TDS accounts the withholding leg.
_DEFAULT_LEDGER_ACCOUNT_CODES = {
    "accounts_payable": "2100",
    "accounts_receivable": "1200",
    "input_cgst": "1500",
    "input_sgst": "1501",
    "input_igst": "1502",
    "input_cess": "1503",
    "output_cgst": "2200",
    "output_sgst": "2201",
    "output_igst": "2202",
    "output_cess": "2203",
    "tds_payable": "2310",
    "tds_receivable": "1510",
}

LEDGER_ACCOUNT_CODES = {
    role: env.str(f"LEDGER_{role.upper()}_CODE", default=code)
    for role, code in _DEFAULT_LEDGER_ACCOUNT_CODES.items()
}

# How many times callers wrapped in retry_on_conflict re-run a posting
LEDGER_POSTING_RETRIES = env.int("LEDGER_POSTING_RETRIES")

# -----------------------------------------
# LOGGING
# -----------------------------------------
LOG_LEVEL = (env("LOG_LEVEL") or "INFO").strip().upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "ledger_core": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
    },
}
