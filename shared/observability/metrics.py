from prometheus_client import Counter, Histogram

# Business Metrics
relay_notifications_total = Counter(
    "relay_notifications_total",
    "Gateway notifications handled",
    ["outcome"] # Labels: 'paid', 'failed', 'ignored', 'not_found', 'already_paid', 'rejected', 'error'
)

relay_reconciliation_duration_seconds = Histogram(
    "relay_reconciliation_duration_seconds",
    "Time spent reconciling one notification against the store"
)

relay_transactions_total = Counter(
    "relay_transactions_total",
    "Snap transactions requested from the gateway",
    ["status"] # Labels: 'success', 'failed'
)

relay_contact_emails_total = Counter(
    "relay_contact_emails_total",
    "Contact form submissions relayed by email",
    ["status"] # Labels: 'sent', 'failed'
)
