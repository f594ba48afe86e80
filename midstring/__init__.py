"""Keys that sort between two lowercase strings, for ordering items without renumbering."""

from .codec import ALPHABET, to_char, to_digit
from .core import keys_between, midpoint, validate
from .errors import InvalidCharacter, InvalidOrder, MidpointError, NoMidpoint, NotFound

__all__ = [
    "ALPHABET",
    "InvalidCharacter",
    "InvalidOrder",
    "MidpointError",
    "NoMidpoint",
    "NotFound",
    "keys_between",
    "midpoint",
    "to_char",
    "to_digit",
    "validate",
]
