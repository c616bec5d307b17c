"""
Error taxonomy shared by the services and the HTTP layer.

Every error carries a machine-readable ``kind`` and a human-readable
``message``; the API maps ``kind`` to a status code.
"""


class IMDFBuilderError(Exception):
    """Base class for all errors surfaced to callers."""

    kind = "error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {"kind": self.kind, "message": self.message}


class InvalidIdentifier(IMDFBuilderError):
    """Malformed or oversized project id, rejected before storage access."""

    kind = "invalid_identifier"
    status_code = 400


class NotFound(IMDFBuilderError):
    kind = "not_found"
    status_code = 404


class InvalidInput(IMDFBuilderError):
    """Unsupported upload, oversized file or an operation the state forbids."""

    kind = "invalid_input"
    status_code = 400


class SerializationFailure(IMDFBuilderError):
    kind = "serialization_failure"
    status_code = 500


class StorageFailure(IMDFBuilderError):
    kind = "storage_failure"
    status_code = 500
