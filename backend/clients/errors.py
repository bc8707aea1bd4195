class MissingCredentialError(Exception):
    """Raised when an endpoint needs a token that is not configured."""


class MalformedPayloadError(ValueError):
    """Raised when a remote response does not have the expected shape."""
