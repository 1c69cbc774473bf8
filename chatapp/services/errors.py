"""Error taxonomy shared by the services and mapped to HTTP statuses by the routers."""


class ChatError(Exception):
    """Base class for domain errors."""


class InvalidRequest(ChatError):
    """Malformed request or missing required identifiers (400)."""


class NotFound(ChatError):
    """Session-scoped entity is absent (404)."""


class UpstreamGenerationFailure(ChatError):
    """The text generation collaborator failed after its own retries."""


class StoreFault(ChatError):
    """Unexpected failure inside the session store (500)."""


class PayloadTooLarge(InvalidRequest):
    """Uploaded file exceeds the configured size limit (413)."""
