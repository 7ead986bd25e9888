"""
Argosy results: what a parse produced and how to read it.

Overview
- Status: the single mutable cell of a parse (first fault, success flag,
  help-requested flag). Shared by reference with every Value of a Result,
  so a conversion error found after parse() returned still flips success.
- Value: read-only view over token[start:stop] tagged with its source node
  and input position. Converts lazily through as_integer/as_double/as_bool.
- Result: ordered record of matched commands, option values, switches,
  argument values and unmatched tokens, plus accessors keyed by node.

Notes
- Positions are indexes into the full token list given to parse(); with
  skip_first the program name sits at index 0. Status.origin remembers how
  many tokens were skipped so faults can say "from first position".
- A Value without a position (and without text) is "missing": it stands in
  for an option or argument that did not occur. Converting it yields None
  without touching the status.
"""
from loguru import logger

from .arguments import Argument, Option, Switch
from .conversions import to_bool, to_double, to_integer
from .faults import ConversionError, DelegatedError, MultipleOccurrencesError
from .utils import Unset, coalesce, ordinal

__all__ = (
    "Status",
    "Value",
    "Result",
)


class Status:
    """
    shared error/success/help cell.

    behavior
    - record(fault): the first recorded fault keeps its message; later ones
      are ignored for the text but still flip the flags when unsuccessful.
    - request_help(): raise the help flag without failing.
    """

    def __init__(self, origin=0):
        self._fault = None
        self._success = True
        self._show_help = False
        self._origin = origin

    @property
    def fault(self):
        return self._fault

    @property
    def error(self):
        return self._fault.message if self._fault is not None else None

    @property
    def success(self):
        return self._success

    @property
    def show_help(self):
        return self._show_help

    @property
    def origin(self):
        return self._origin

    def record(self, fault, /, unsuccessful=True):
        if self._fault is None:
            self._fault = fault
        if unsuccessful:
            self._success = False
            self._show_help = True
        logger.debug("status.record code={} unsuccessful={} message={!r}", fault.code.value, unsuccessful, fault.message)

    def request_help(self):
        self._show_help = True

    def _snapshot(self):
        return self.error, self._success, self._show_help

    def __eq__(self, other):
        if not isinstance(other, Status):
            return NotImplemented
        return self._snapshot() == other._snapshot()

    __hash__ = None

    def __repr__(self):
        return f"status(success={self._success!r}, show_help={self._show_help!r}, error={self.error!r})"


class Value:
    """
    Read-only view over part of one input token.

    Parameters
    - token: str
      The whole input token the view slices into.
    - start, stop: int
      Slice bounds; stop defaults to len(token).
    - source: Unset | Node
      Declared option or argument the value belongs to.
    - position: Unset | int
      Index of the token in the parsed list; Unset means "no position".
    - status: Unset | Status
      Shared cell where conversion faults land. A private one is created for
      standalone values.

    Comparison
    - Equal to a str with the same text.
    - Equal to another Value with the same text, source and position.
    """

    def __init__(self, token="", start=0, stop=Unset, /, *, source=Unset, position=Unset, status=Unset):
        if not isinstance(token, str):
            raise TypeError("value token must be a string")
        self._token = token
        self._start = start
        self._stop = coalesce(stop, len(token))
        self._source = coalesce(source)
        self._position = coalesce(position)
        self._status = coalesce(status, Status())

    @property
    def text(self):
        return self._token[self._start:self._stop]

    @property
    def token(self):
        return self._token

    @property
    def source(self):
        return self._source

    @property
    def position(self):
        return self._position

    @property
    def status(self):
        return self._status

    @property
    def missing(self):
        return self._position is None and not self.text

    @property
    def subject(self):
        """
        Label naming where this value came from, used in fault messages.
        """
        match self._source:
            case Option():
                subject = f"option {self._source.primary!r}"
            case Argument():
                subject = f"argument {self._source.name!r}"
            case _:
                subject = f"value {self.text!r}"
        if self._position is None:
            return subject
        return f"{subject} from {ordinal(self._position - self._status.origin + 1)} position"

    def _convert(self, converter, error):
        if self.missing:
            return None
        try:
            return converter(self.text, self.subject)
        except ConversionError as fault:
            if error:
                self._status.record(fault.with_options(source=self._source, position=self._position))
            return None

    def as_integer(self, error=True):
        """
        Convert to a signed 64-bit int; None when missing or invalid.

        With error=False an invalid value does not touch the shared status.
        """
        return self._convert(to_integer, error)

    def as_double(self, error=True):
        """
        Convert to float; None when missing or invalid.
        """
        return self._convert(to_double, error)

    def as_bool(self, error=True):
        """
        Convert to bool; None when missing or invalid.
        """
        return self._convert(to_bool, error)

    def __str__(self):
        return self.text

    def __len__(self):
        return self._stop - self._start

    def __bool__(self):
        return not self.missing

    def __eq__(self, other):
        if isinstance(other, str):
            return self.text == other
        if not isinstance(other, Value):
            return NotImplemented
        return (self.text, self._source, self._position) == (other.text, other._source, other._position)

    def __hash__(self):
        return hash(self.text)

    def __repr__(self):
        if self._position is None:
            return f"value({self.text!r})"
        return f"value({self.text!r}, position={self._position!r})"

    def __rich_repr__(self):
        yield self.text
        yield "source", getattr(self._source, "primary", None), None
        yield "position", self._position, None


class Result:
    """
    Everything a parse produced, in input order.

    Read access
    - commands / options / switches / arguments / unmatched: tuples.
    - has_command(), option_count(), option_values(), option_value(),
      switch_count(), argument(), has_unmatched.
    - success / show_help / error / fault: the shared status.

    Write access
    - set_error(): record a host-side validation error in the shared status.
    """

    def __init__(self, status=Unset, /):
        self._status = coalesce(status, Status())
        self._commands = []
        self._options = []
        self._switches = []
        self._arguments = []
        self._unmatched = []

    @property
    def status(self):
        return self._status

    @property
    def success(self):
        return self._status.success

    @property
    def show_help(self):
        return self._status.show_help

    @property
    def error(self):
        return self._status.error

    @property
    def fault(self):
        return self._status.fault

    @property
    def commands(self):
        return tuple(self._commands)

    @property
    def options(self):
        return tuple(self._options)

    @property
    def switches(self):
        return tuple(self._switches)

    @property
    def arguments(self):
        return tuple(self._arguments)

    @property
    def unmatched(self):
        return tuple(self._unmatched)

    @property
    def has_unmatched(self):
        return bool(self._unmatched)

    def _missing(self):
        return Value(status=self._status)

    def has_command(self, command, /):
        return command in self._commands

    def option_values(self, option, /):
        if not isinstance(option, Option):
            raise TypeError("option_values() argument must be an option")
        return tuple(value for value in self._options if value.source == option)

    def option_count(self, option, /):
        return len(self.option_values(option))

    def option_value(self, option, /, error_if_multiple=False):
        """
        Return the first value of option, or a missing Value.

        With error_if_multiple=True and more than one occurrence, a
        MultipleOccurrencesError is recorded (failing the result) and a
        missing Value is returned instead.
        """
        values = self.option_values(option)
        if error_if_multiple and len(values) > 1:
            self._status.record(MultipleOccurrencesError(
                f"option was specified multiple times in the command line: {option.primary}",
                option=option,
                count=len(values),
            ))
            return self._missing()
        return values[0] if values else self._missing()

    def switch_count(self, switch, /):
        if not isinstance(switch, Switch):
            raise TypeError("switch_count() argument must be a switch")
        return sum(1 for matched in self._switches if matched == switch)

    def argument(self, argument, /):
        """
        Return the value bound to argument, or a missing Value.
        """
        if not isinstance(argument, Argument):
            raise TypeError("argument() argument must be an argument")
        return next((value for value in self._arguments if value.source == argument), self._missing())

    def set_error(self, message, /, unsuccessful=True):
        """
        Record a host-side error; only the first message is kept.
        """
        if not isinstance(message, str):
            raise TypeError("set_error() argument must be a string")
        self._status.record(DelegatedError(message), unsuccessful=unsuccessful)

    def _snapshot(self):
        def values(collection):
            return tuple((value.text, value.source, value.position) for value in collection)

        return (
            tuple(self._commands),
            values(self._options),
            tuple(self._switches),
            values(self._arguments),
            values(self._unmatched),
            self._status._snapshot(),
        )

    def __eq__(self, other):
        if not isinstance(other, Result):
            return NotImplemented
        return self._snapshot() == other._snapshot()

    __hash__ = None

    def __rich_repr__(self):
        yield "success", self.success
        yield "show_help", self.show_help
        yield "error", self.error, None
        yield "commands", self.commands, ()
        yield "options", self.options, ()
        yield "switches", self.switches, ()
        yield "arguments", self.arguments, ()
        yield "unmatched", self.unmatched, ()

    def __repr__(self):
        return f"result(success={self.success!r}, show_help={self.show_help!r}, error={self.error!r})"
