ALPHABET = "abcdefghijklmnopqrstuvwxyz"
A2I = {ch: i for i, ch in enumerate(ALPHABET)}
I2A = {i: ch for i, ch in enumerate(ALPHABET)}
MIN_DIGIT = 0
MAX_DIGIT = len(ALPHABET) - 1
FILLER_DIGIT = 13  # 'n'
CEILING = len(ALPHABET)  # one past 'z'; an absent upper bound


def to_digit(ch: str) -> int:
    return A2I[ch]


def to_char(digit: int) -> str:
    return I2A[digit]
