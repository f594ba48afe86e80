from __future__ import annotations

from .codec import A2I, CEILING, FILLER_DIGIT, MIN_DIGIT, to_char, to_digit
from .errors import InvalidCharacter, InvalidOrder, NoMidpoint


def validate(low: str, high: str) -> None:
    """Reject inputs the walk cannot place a key between.

    An empty ``high`` is unbounded, so any ``low`` is accepted with it.
    """
    for name, value in (("low", low), ("high", high)):
        for pos, ch in enumerate(value):
            if ch not in A2I:
                raise InvalidCharacter(name, pos, ch)
    if not high:
        return
    if low >= high:
        raise InvalidOrder(low, high)
    tail = high[len(low) :]
    if high.startswith(low) and tail == "a" * len(tail):
        raise NoMidpoint(low, high)


def midpoint(low: str, high: str) -> str:
    """Return the shortest key the digit walk finds strictly between ``low`` and ``high``.

    ``low`` may be empty (no lower bound) and ``high`` may be empty (no upper
    bound). Both sides are read digit by digit, ``a`` = 0 through ``z`` = 25:

    * equal digits are copied and the walk moves on;
    * adjacent digits copy the lower one, after which the output is already
      below ``high`` and the upper bound is lifted to 26;
    * digits two or more apart emit the rounded-up average and stop.

    An exhausted ``low`` reads as 0 and, with no upper bound left, the walk
    ends on the filler ``n``.

    >>> midpoint("aaa", "aaz")
    'aan'
    >>> midpoint("abc", "abcab")
    'abcaan'
    """
    validate(low, high)
    i = 0
    bounded = bool(high)
    out: list[str] = []
    while True:
        if i >= len(low) and not (bounded and i < len(high)):
            out.append(to_char(FILLER_DIGIT))
            return "".join(out)
        l = to_digit(low[i]) if i < len(low) else MIN_DIGIT
        r = to_digit(high[i]) if bounded and i < len(high) else CEILING
        gap = r - l
        if gap >= 2:
            out.append(to_char((l + r + 1) // 2))
            return "".join(out)
        if gap == 1:
            bounded = False
        out.append(to_char(l))
        i += 1


def keys_between(low: str, high: str, count: int) -> list[str]:
    """Return ``count`` increasing keys strictly between ``low`` and ``high``.

    Keys are placed by bisection so that they stay short when inserted in bulk.
    """
    if count <= 0:
        return []
    mid = midpoint(low, high)
    left = (count - 1) // 2
    return keys_between(low, mid, left) + [mid] + keys_between(mid, high, count - 1 - left)
