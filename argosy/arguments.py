"""
Argosy declarations: positional arguments, options and switches.

Scope
- Node: base of every declared object. Carries a process-unique identity,
  read-only metadata properties and the "sealed once adopted" rule.
- Argument: positional value, bound by declaration order.
- Option: named, value-bearing; accepts "--name value" and fused
  "--name=value" / "--name:value" / "--name value" (single token) forms.
- Switch: named, presence-only; every occurrence is counted.

Identity
- Every node gets the next integer of a process-wide counter when built.
- copy.copy() and copy.deepcopy() keep the id, so a copy still correlates
  with results produced for its source. Nodes compare and hash by id.

Sealing
- Adding a node to a command or parser seals it. Any later mutation
  (add_alias, add, policy changes) raises TypeError. The copied node starts
  unsealed; children deep-copied along with their container stay sealed.

Quick examples
    >>> verbose = Switch("--verbose", "-v", descr="print more")
    >>> level = Option(Alias.insensitive("--level"), "-l", metavar="int")
    >>> level.match_with_value("--LEVEL=3")
    '3'
    >>> source = Argument("source", required=False)
"""
import copy
import functools
import itertools
import operator
import re

from rich.text import Text

from .aliases import Alias, _sanitize_alias
from .utils import Unset, coalesce, mirror, rename

_identities = itertools.count(1)

# Characters allowed between an option alias and its fused value.
SEPARATORS = ":= "


class NodeType(type):
    """
    Metaclass for declared nodes.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens);
      used in configuration error messages and help output.
    - Expose every name listed in __introspectable__ as a read-only property
      backed by the matching "_name" attribute (see mirror()).
    - Provide stable __repr__/__rich_repr__ implementations.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class Node(metaclass=NodeType):
    """
    Base of every declared object: identity, sealing and copy semantics.
    """
    __introspectable__ = ("id",)

    def __new__(cls):
        self = super().__new__(cls)
        self._id = next(_identities)
        self._sealed = False
        return self

    def __eq__(self, other):
        if not isinstance(other, Node):
            return NotImplemented
        return self._id == other._id

    def __hash__(self):
        return hash(self._id)

    def __copy__(self):
        clone = object.__new__(type(self))
        clone.__dict__.update({
            name: list(object) if isinstance(object, list) else object
            for name, object in self.__dict__.items()
        })
        clone._sealed = False
        return clone

    def __deepcopy__(self, memo, /):
        # an empty memo marks the outermost node; its copied children stay adopted
        outermost = not memo
        clone = object.__new__(type(self))
        memo[id(self)] = clone
        clone.__dict__.update(copy.deepcopy(self.__dict__, memo))
        if outermost:
            clone._sealed = False
        return clone

    @property
    def sealed(self):
        return self._sealed

    def _seal(self):
        self._sealed = True
        return self

    def _ensure_mutable(self):
        if self._sealed:
            raise TypeError(f"{type(self).__typename__} cannot be changed once added to a container")


class Named(Node):
    """
    Node spelled by one or more aliases (options, switches and commands).

    The first declared alias is the primary one: it names the node in fault
    messages and leads the alias list in help.
    """

    def __new__(cls, aliases):
        self = super().__new__(cls)
        if not aliases:
            raise TypeError(f"{cls.__typename__} must specify at least one alias")
        self._aliases = [_sanitize_alias(alias) for alias in aliases]
        return self

    @property
    def names(self):
        return tuple(alias.name for alias in self._aliases)

    @property
    def primary(self):
        return self._aliases[0].name

    @property
    def display(self):
        return ", ".join(self.names)

    def matches(self, token, /):
        """
        True when token spells any alias of this node.
        """
        return any(alias.matches(token) for alias in self._aliases)

    def add_alias(self, alias, /):
        """
        Append another spelling; returns self for chaining.
        """
        self._ensure_mutable()
        self._aliases.append(_sanitize_alias(alias))
        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate the descr/hidden metadata shared by every node.

    Raises
    - TypeError: if 'descr' is not a string (or rich Text) or Unset.
    - ValueError: if 'descr' is a string but empty after trimming.
    """
    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)
    metadata["hidden"] = bool(metadata["hidden"])


class Argument(Node):
    """
    Positional argument declaration.

    Arguments are bound to input tokens strictly in declaration order, one
    token each. A required argument left unbound fails the parse.
    """

    __introspectable__ = (
        "id",
        "name",
        "descr",
        "required",
        "hidden",
    )

    def __new__(cls, name, /, descr=Unset, *, required=True, hidden=False):
        """
        Parameters
        - name: str
          Display name, used in usage lines and fault messages.
        - descr: Unset | str
          Short description for help.
        - required: bool
          Defaults to True.
        - hidden: bool
          Suppress from help output (still parsed).
        """
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not name:
            raise ValueError(f"{cls.__typename__} 'name' cannot be empty")

        metadata = {
            "name": name,
            "descr": descr,
            "required": bool(required),
            "hidden": hidden,
        }
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def primary(self):
        return self._name

    @property
    def display(self):
        return self._name


class Option(Named):
    """
    Named, value-bearing option declaration.

    Each occurrence in the input yields one value; occurrences are kept in
    input order. The value comes from the next token ("-o value") or from the
    same token after a separator ("-o=value", "-o:value").
    """

    __introspectable__ = (
        "id",
        "metavar",
        "descr",
        "hidden",
    )
    __displayable__ = (
        "id",
        "names",
        "metavar",
        "descr",
        "hidden",
    )

    def __new__(cls, *aliases, metavar=Unset, descr=Unset, hidden=False):
        """
        Parameters
        - aliases: one or more str | Alias
          Spellings of the option. Plain strings are case-sensitive.
        - metavar: Unset | str
          Placeholder for the value in help ("file", "int", ...).
        - descr: Unset | str
          Short description for help.
        - hidden: bool
          Suppress from help output (still parsed).
        """
        if not isinstance(metavar, str | Unset):
            raise TypeError(f"{cls.__typename__} 'metavar' must be a string")
        elif isinstance(metavar, str) and not (metavar := metavar.strip()):
            raise ValueError(f"{cls.__typename__} 'metavar' cannot be empty")

        metadata = {
            "metavar": coalesce(metavar),
            "descr": descr,
            "hidden": hidden,
        }
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls, aliases)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def match_with_value(self, token, /):
        """
        Match the fused form and return the value part, or None.

        The token must start with one of the aliases (under its casing mode)
        immediately followed by a separator. The value is returned verbatim
        and may be empty ("--name=").
        """
        for alias in self._aliases:
            if len(token) > len(alias.name) and alias.prefixes(token) and token[len(alias.name)] in SEPARATORS:
                return token[len(alias.name) + 1:]
        return None


class Switch(Named):
    """
    Named, presence-only switch declaration. Every occurrence is counted.
    """

    __introspectable__ = (
        "id",
        "descr",
        "hidden",
    )
    __displayable__ = (
        "id",
        "names",
        "descr",
        "hidden",
    )

    def __new__(cls, *aliases, descr=Unset, hidden=False):
        metadata = {
            "descr": descr,
            "hidden": hidden,
        }
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls, aliases)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self


__all__ = (
    "Node",
    "Argument",
    "Option",
    "Switch",
)
