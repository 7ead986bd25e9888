"""
Argosy aliases: spellings and the name matcher.

An alias is one recognized spelling of a command, option or switch. Every
alias carries its own casing mode, so a single node may accept "--input"
in any case while keeping "-i" strictly lowercase.

Matching rules
- Full-length comparison only; no prefix or abbreviation matching.
- Casing.INSENSITIVE lowers both sides one character at a time with
  str.lower(), which does not depend on the current locale.

Quick examples
    >>> Alias("--input", Casing.INSENSITIVE).matches("--INPUT")
    True
    >>> Alias("-i").matches("-I")
    False
"""
from enum import Enum

__all__ = (
    "Casing",
    "Alias",
)


class Casing(Enum):
    """
    case-sensitivity mode of a single alias.
    """
    SENSITIVE = "sensitive"
    INSENSITIVE = "insensitive"


class Alias:
    """
    Immutable (name, casing) pair.

    Parameters
    - name: str
      The spelling, compared verbatim. Must be non-empty.
    - casing: Casing
      Defaults to Casing.SENSITIVE.

    Raises
    - TypeError: when name is not a string or casing is not a Casing.
    - ValueError: when name is empty.
    """
    __slots__ = ("_name", "_casing")

    def __init__(self, name, casing=Casing.SENSITIVE, /):
        if not isinstance(name, str):
            raise TypeError("alias name must be a string")
        if not name:
            raise ValueError("alias name cannot be an empty-string")
        if not isinstance(casing, Casing):
            raise TypeError("alias casing must be a Casing member")
        self._name = name
        self._casing = casing

    @classmethod
    def insensitive(cls, name, /):
        """Shorthand for Alias(name, Casing.INSENSITIVE)."""
        return cls(name, Casing.INSENSITIVE)

    @property
    def name(self):
        return self._name

    @property
    def casing(self):
        return self._casing

    def matches(self, token, /):
        """
        Return True when token spells this alias under its casing mode.
        """
        if len(token) != len(self._name):
            return False
        if self._casing is Casing.SENSITIVE:
            return token == self._name
        return all(x.lower() == y.lower() for x, y in zip(token, self._name))

    def prefixes(self, token, /):
        """
        Return True when token starts with this alias under its casing mode.
        """
        if len(token) < len(self._name):
            return False
        return self.matches(token[:len(self._name)])

    def __eq__(self, other):
        if not isinstance(other, Alias):
            return NotImplemented
        return (self._name, self._casing) == (other._name, other._casing)

    def __hash__(self):
        return hash((self._name, self._casing))

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __str__(self):
        return self._name

    def __repr__(self):
        if self._casing is Casing.SENSITIVE:
            return f"alias({self._name!r})"
        return f"alias({self._name!r}, insensitive)"

    def __rich_repr__(self):
        yield self._name
        yield "casing", self._casing.value, Casing.SENSITIVE.value


def _sanitize_alias(object, /):
    """
    Internal: promote a plain string into a case-sensitive Alias.
    """
    if isinstance(object, Alias):
        return object
    if isinstance(object, str):
        return Alias(object)
    raise TypeError("aliases must be strings or Alias instances")
