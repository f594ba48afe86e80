from __future__ import annotations

from typing import Any, Dict


class MidpointError(ValueError):
    """Base class for inputs that have no key between them."""

    code = "midpoint_error"

    def details(self) -> Dict[str, Any]:
        return {}


class InvalidCharacter(MidpointError):
    code = "invalid_character"

    def __init__(self, argument: str, position: int, char: str) -> None:
        super().__init__(f"{argument}[{position}] = {char!r} is not a lowercase letter a-z")
        self.argument = argument
        self.position = position
        self.char = char

    def details(self) -> Dict[str, Any]:
        return {"argument": self.argument, "position": self.position, "char": self.char}


class InvalidOrder(MidpointError):
    code = "invalid_order"

    def __init__(self, low: str, high: str) -> None:
        super().__init__(f"low {low!r} must sort before high {high!r}")
        self.low = low
        self.high = high

    def details(self) -> Dict[str, Any]:
        return {"low": self.low, "high": self.high}


class NoMidpoint(MidpointError):
    """``high`` is ``low`` followed only by 'a's.

    Any key between them would itself end in 'a' (there is none at all when
    only one 'a' follows), and such keys leave no room for later inserts, so
    the walk does not produce them.
    """

    code = "no_midpoint"

    def __init__(self, low: str, high: str) -> None:
        super().__init__(f"cannot place a key between {low!r} and {high!r}: high is low followed only by 'a'")
        self.low = low
        self.high = high

    def details(self) -> Dict[str, Any]:
        return {"low": self.low, "high": self.high}


class NotFound(LookupError):
    code = "not_found"

    def __init__(self, kind: str, ident: str) -> None:
        super().__init__(f"{kind} {ident} not found")
        self.kind = kind
        self.ident = ident


class VersionConflict(Exception):
    """The caller's expected version no longer matches the stored one."""

    code = "precondition_failed"

    def __init__(self, kind: str, ident: str, expected: int, actual: int) -> None:
        super().__init__(f"{kind} {ident} is at version {actual}, expected {expected}")
        self.kind = kind
        self.ident = ident
        self.expected = expected
        self.actual = actual
