from __future__ import annotations


class ParseError(ValueError):
    """Base for every failure that ends a parse run."""


class OutOfBounds(ParseError):
    def __init__(self, position: int, requested: int, length: int):
        self.position = position
        self.requested = requested
        self.length = length
        super().__init__(
            f"out of bounds: {requested:+d} bytes at {position} (buffer is {length} bytes)"
        )


class LiteralMismatch(ParseError):
    def __init__(self, expected: str, actual: str, position: int | None = None):
        self.expected = expected
        self.actual = actual
        self.position = position
        where = f" at {position}" if position is not None else ""
        super().__init__(f"expected literal {expected!r}{where}, found {actual!r}")


class UnknownField(ParseError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"no field bound as {name!r}")


class TypeMismatch(ParseError):
    def __init__(self, name: str, expected: str, actual: str):
        self.name = name
        self.expected = expected
        self.actual = actual
        super().__init__(f"field {name!r}: expected {expected}, got {actual}")


class UnknownShape(ParseError):
    def __init__(self, tag: str):
        self.tag = tag
        super().__init__(f"unknown shape {tag!r}")


class SessionClosed(ParseError):
    pass
