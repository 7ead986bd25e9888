"""
Typed value parsers: integer, double and boolean mini-grammars.

contract
- every parser receives the raw value text and a subject label used in
  messages ("option '--value' from third position").
- leading and trailing whitespace is ignored; offsets in messages are 1-based
  and count from the start of the raw value.
- on success the converted Python value is returned; on failure a
  ConversionError subclass is raised. Value.as_*() catch it and decide
  whether it lands in the shared status.

grammars
- integer: [+-]? ( [0-9]+ | [xX][0-9a-fA-F]+ | [bB][01]+ )
  range is the signed 64-bit range, checked before every multiply-add.
- double:  [+-]? int? ( '.' frac? )? ( [eE] [+-]? exp )?
  at least one digit across int and frac. fraction digits past what a
  signed 64-bit accumulator can hold are dropped.
- boolean: true/t/on/yes/y and false/f/off/no/n in any case; short inputs
  (5 characters or fewer) fall back to the integer grammar (non-zero is true).
"""
import math
from fractions import Fraction

from .faults import (
    ConversionError,
    DataTypeLimitError,
    EmptyValueError,
    MalformedValueError,
    MissingDigitsError,
    UnexpectedInputError,
)

INT64_MAX = 2 ** 63 - 1

_DIGITS = "0123456789abcdef"
_BASES = {
    "x": 16,
    "X": 16,
    "b": 2,
    "B": 2,
}
_TRUTHY = frozenset(("true", "t", "on", "yes", "y"))
_FALSY = frozenset(("false", "f", "off", "no", "n"))

# Past this exponent every non-zero mantissa the grammar accepts leaves the
# float range (above DBL_MAX or below the smallest subnormal).
_EXPONENT_CUTOFF = 400


def _digit(char, base, /):
    """
    Value of char in base, or None when char is outside the digit set.

    Only ASCII digits are accepted (str.isdigit() would let other scripts in).
    """
    index = _DIGITS.find(char.lower()) if len(char.lower()) == 1 else -1
    return index if 0 <= index < base else None


def _trim(raw, /):
    """
    Return the stripped text and the count of leading blanks removed.
    """
    text = raw.strip()
    return text, (len(raw) - len(raw.lstrip())) if text else 0


def _accumulate(number, digit, base, limit, /):
    """
    One multiply-add step, refusing to leave [0, limit].
    """
    if number > (limit - digit) // base:
        raise OverflowError
    return number * base + digit


def to_integer(raw, /, subject="value"):
    """
    Parse raw as a signed 64-bit integer (decimal, x-hex or b-binary).
    """
    text, lead = _trim(raw)
    if not text:
        raise EmptyValueError(f"{subject} is empty, expected an integer", value=raw)

    index = 0
    negative = False
    if text[index] in "+-":
        negative = text[index] == "-"
        index += 1

    base = 10
    if index < len(text) and text[index] in _BASES:
        base = _BASES[text[index]]
        index += 1

    if index == len(text):
        raise MissingDigitsError(f"{subject} has no digits, expected an integer", value=raw)

    # the negative range reaches one further than the positive one
    limit = INT64_MAX + negative
    number = 0
    for offset in range(index, len(text)):
        if (digit := _digit(text[offset], base)) is None:
            raise MalformedValueError(
                f"unexpected character {text[offset]!r} at offset {lead + offset + 1} of {subject}",
                value=raw,
                offset=lead + offset + 1,
            )
        try:
            number = _accumulate(number, digit, base, limit)
        except OverflowError:
            raise DataTypeLimitError(f"{subject} exceeds the signed 64-bit integer range", value=raw) from None

    return -number if negative else number


def to_double(raw, /, subject="value"):
    """
    Parse raw as a floating point number.

    The result is (int + frac / 10**digits) * 10**(+-exp), computed exactly
    and rounded once, with the sign applied last. Results beyond the float
    range give inf (or 0.0 below the smallest subnormal) instead of an error.
    """
    text, lead = _trim(raw)
    if not text:
        raise EmptyValueError(f"{subject} is empty, expected a number", value=raw)

    def malformed(offset):
        return MalformedValueError(
            f"unexpected character {text[offset]!r} at offset {lead + offset + 1} of {subject}",
            value=raw,
            offset=lead + offset + 1,
        )

    def overflow():
        return DataTypeLimitError(f"{subject} exceeds the signed 64-bit integer range", value=raw)

    index = 0
    negative = False
    if text[index] in "+-":
        negative = text[index] == "-"
        index += 1

    digits = 0
    integral = 0
    while index < len(text) and (digit := _digit(text[index], 10)) is not None:
        try:
            integral = _accumulate(integral, digit, 10, INT64_MAX)
        except OverflowError:
            raise overflow() from None
        digits += 1
        index += 1

    fraction = 0
    scale = 0
    if index < len(text) and text[index] == ".":
        index += 1
        while index < len(text) and (digit := _digit(text[index], 10)) is not None:
            try:
                fraction = _accumulate(fraction, digit, 10, INT64_MAX)
                scale += 1
            except OverflowError:
                pass  # precision cap, the remaining digits are dropped
            digits += 1
            index += 1

    if not digits:
        if index < len(text) and text[index] not in "eE":
            raise malformed(index)
        raise MissingDigitsError(f"{subject} has no digits, expected a number", value=raw)

    exponent = 0
    downwards = False
    if index < len(text) and text[index] in "eE":
        index += 1
        if index < len(text) and text[index] in "+-":
            downwards = text[index] == "-"
            index += 1
        start = index
        while index < len(text) and (digit := _digit(text[index], 10)) is not None:
            try:
                exponent = _accumulate(exponent, digit, 10, INT64_MAX)
            except OverflowError:
                raise overflow() from None
            index += 1
        if index == start:
            if index < len(text):
                raise malformed(index)
            raise MissingDigitsError(f"{subject} has an exponent without digits", value=raw)

    if index < len(text):
        raise malformed(index)

    number = Fraction(integral * 10 ** scale + fraction, 10 ** scale)
    if number and exponent:
        if exponent > _EXPONENT_CUTOFF:
            number = 0 if downwards else math.inf
        else:
            number *= Fraction(10) ** (-exponent if downwards else exponent)

    try:
        number = float(number)
    except OverflowError:
        number = math.inf
    return -number if negative else number


def to_bool(raw, /, subject="value"):
    """
    Parse raw as a boolean word, or as an integer when it is short enough.
    """
    text = raw.strip()
    if text.lower() in _TRUTHY:
        return True
    if text.lower() in _FALSY:
        return False
    if len(text) <= 5:
        try:
            return to_integer(raw, subject) != 0
        except ConversionError:
            pass  # reported below as unexpected input
    raise UnexpectedInputError(f"unexpected input {text!r} for {subject}, expected a boolean", value=raw)


__all__ = (
    "INT64_MAX",
    "to_integer",
    "to_double",
    "to_bool",
)
