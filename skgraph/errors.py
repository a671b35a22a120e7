
class SKError(Exception):
    """ Base class for all skgraph errors"""
    pass


class ParseError(SKError):
    """ Raised when source text is not a well-formed s-expression"""

    def __init__(self, message: str, position: int | None = None):
        if position is not None:
            message = f"{message} (at offset {position})"
        super().__init__(message)
        self.position = position


class ShapeError(SKError):
    """ Raised when a list has a length other than 0 or 2 where a pair or binder was required"""


class DefinitionFormError(SKError):
    """ Raised when a basis form is not a well-formed (def name body) or (defn name (params) body)"""


class RecursiveDefinitionError(DefinitionFormError):
    """ Raised when inlining a definition reaches the same definition again"""
