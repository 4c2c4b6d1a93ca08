"""Error taxonomy for the generation pipeline."""


class ItemForgeError(Exception):
    """Base class for all itemforge errors."""


class InputValidationError(ItemForgeError):
    """The request or its schema source is missing or malformed."""


class TransportError(ItemForgeError):
    """The text-generation service could not be reached or failed."""


class EmptyResponseError(ItemForgeError):
    """The service answered with no choices or empty content."""


class ParseError(ItemForgeError):
    """The response could not be read as JSON at the whole-response level."""

    def __init__(self, message: str, diagnostics=()):
        super().__init__(message)
        self.diagnostics = list(diagnostics)


class PartialElementError(ItemForgeError):
    """A single array element failed normalization or structured parse."""

    def __init__(self, message: str, index: int = 0, fragment: str = ""):
        super().__init__(message)
        self.index = index
        self.fragment = fragment
