"""Domain errors raised by the services and mapped to HTTP responses by the routers."""


class RecordNotFound(LookupError):
    def __init__(self, kind: str, record_id) -> None:
        super().__init__(f"{kind} {record_id} not found")
        self.kind = kind
        self.record_id = record_id


class FormValidationError(ValueError):
    """The prescription form is not complete enough to be rendered."""


class ConfirmationRequired(ValueError):
    """A destructive operation was requested without the expected confirmation text."""


class ShareError(RuntimeError):
    """The share target could not accept the artifact. Safe to retry."""
