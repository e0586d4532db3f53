from .setup import setup_observability, configure_logging
from .metrics import (
    relay_notifications_total,
    relay_reconciliation_duration_seconds,
    relay_transactions_total,
    relay_contact_emails_total
)
