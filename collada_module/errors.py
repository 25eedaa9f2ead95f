"""
COLLADA Errors

Exception taxonomy raised while assembling a COLLADA document. Every fatal
parse error aborts the whole parse; unknown elements and attributes are
never reported.
"""

from typing import Optional


class ColladaError(Exception):
    """General COLLADA exception."""

    def __init__(self, msg: str):
        super().__init__(msg)
        self.msg = msg

    def __str__(self) -> str:
        return type(self).__name__ + ': ' + self.msg

    def __repr__(self) -> str:
        return type(self).__name__ + '("' + self.msg + '")'


class ColladaParseError(ColladaError):
    """Base class of the fatal errors raised while consuming the event stream."""
    pass


class MalformedValueError(ColladaParseError):
    """Raised when a text payload or attribute does not decode as its declared type."""

    def __init__(self, msg: str, value: Optional[str] = None):
        super().__init__(msg)
        self.value = value


class MissingRequiredAttributeError(ColladaParseError):
    """Raised when an element lacks an attribute the model cannot be built without."""

    def __init__(self, element: str, attribute: str):
        super().__init__(f"<{element}> is missing required attribute '{attribute}'")
        self.element = element
        self.attribute = attribute


class InvalidReferenceSyntaxError(ColladaParseError):
    """Raised when a URI-valued attribute or text is not a syntactically valid URI."""

    def __init__(self, uri: str, reason: str = "invalid URI syntax"):
        super().__init__(f"{uri!r} is not a valid URI: {reason}")
        self.uri = uri
        self.reason = reason


class IllegalStateError(ColladaError):
    """Raised when the engine is used out of order (e.g. document requested mid-parse)."""
    pass
