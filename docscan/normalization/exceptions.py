class MalformedPayloadError(Exception):
    """Raised when an analysis payload cannot be parsed as a structured object."""
