class RelayError(Exception):
    """Base class for failures surfaced at the handler boundary."""


class ConfigurationError(RelayError):
    def __init__(self, capability: str, missing: list[str]):
        self.capability = capability
        self.missing = list(missing)
        super().__init__(f"{capability} is not configured: missing {', '.join(self.missing)}")


class GatewayError(RelayError):
    """The payment gateway rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None, response: dict | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class MailDeliveryError(RelayError):
    pass


class MissingRecordError(RelayError):
    """A record referenced by a reconciliation unit does not exist."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} '{record_id}' does not exist")


class SignatureError(RelayError):
    """A gateway notification failed signature verification."""
