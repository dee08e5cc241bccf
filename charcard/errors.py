class FormatError(ValueError):
    """Base class for everything that can go wrong while reading a card."""
    pass


class NotAnImage(FormatError):
    pass


class TruncatedChunkHeader(FormatError):
    pass


class TruncatedChunkPayload(FormatError):
    pass


class NoMetadataFound(FormatError):
    pass


class MalformedEncoding(FormatError):
    """The chara payload is not valid base64."""

    def __init__(self, message, cause=None):
        super().__init__(message)
        self.cause = cause


class InvalidMetadataSchema(FormatError):
    """The decoded payload matches neither the V2 envelope nor the flat V1 layout."""

    def __init__(self, message, cause=None):
        super().__init__(message)
        self.cause = cause
