"""
Argosy faults (parse, accessor and conversion errors) and rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing problem.
- ParseFault: base type carrying message + options; knows how to render
  itself through rich in a short, lowercased and actionable way.
- report(): central entry point to print a recorded fault.

Behavior
- Faults are never raised out of Parser.parse() or the typed accessors. The
  engine and the conversion parsers build them and store the first one in
  the shared status cell of a Result; printing is up to the host.
- Configuration mistakes (empty alias, wrong types) are not faults: they
  raise TypeError/ValueError at construction time.

Integration
- Override palette entries with a __styles__ mapping in __main__.
- Remap numeric codes with a __codes__ mapping in __main__.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

stderr = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - parse errors (2110x): recorded while classifying the token list.
    - accessor errors (2111x): recorded by Result accessors after parsing.
    - conversion errors (2112x): recorded by the typed value parsers.
    - delegated errors (21131): recorded by the host through set_error().
    """
    # --- parse errors (21xxx) ---
    OPTION_VALUE_EXPECTED       = 21101
    UNMATCHED_ARGUMENTS         = 21102
    REQUIRED_ARGUMENT_MISSING   = 21103
    MALFORMED_INPUT             = 21104

    # --- accessor errors (21xxx) ---
    MULTIPLE_OCCURRENCES        = 21111

    # --- conversion errors (21xxx) ---
    EMPTY_VALUE                 = 21121
    MALFORMED_VALUE             = 21122
    MISSING_DIGITS              = 21123
    DATA_TYPE_LIMIT             = 21124
    UNEXPECTED_INPUT            = 21125

    # --- delegated errors (21xxx) ---
    DELEGATED_ERROR             = 21131

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__ to
        override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ParseFault(Exception):
    """
    Base fault: a message plus free-form context options.

    Subclasses set the class attributes code, title and hint. Context options
    usually include the node involved (option=..., argument=...) and, once
    handed to report(), the rendering flags prog, colorful and fancy.
    """
    code = FaultCode.DELEGATED_ERROR
    title = "error"
    hint = Unset

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # green arrow
            "hint": "italic #9CE19C",  # green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", True)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            return Text(str(fragment), style)

        prog = text(getattr(main, "__prog__", self.options.get("prog", "")), styler("prog-name"))

        header = Text.assemble(
            "[ ",
            *((prog, " | ") if prog else ()),
            text(self.code.normalize(), styler("code")),
            " | ",
            text(self.title.title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))

        renders = [message]
        if hint := coalesce(self.options.get("hint", self.hint)):
            renders.append(Text.assemble(text(" -> ", styler("hint-arrow")), text(hint, styler("hint"))))

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def with_options(self, **overrides):
        """
        return a copy of this fault with merged context options.
        """
        return type(self)(self.message, **{**self.options, **overrides})

    __replace__ = with_options

    def __eq__(self, other):
        if not isinstance(other, ParseFault):
            return NotImplemented
        return (type(self), self.message) == (type(other), other.message)

    __hash__ = Exception.__hash__


class OptionValueExpectedError(ParseFault):
    code = FaultCode.OPTION_VALUE_EXPECTED
    title = "option value expected"
    hint = "pass a value after the option, or fuse it as name=value"


class UnmatchedArgumentsError(ParseFault):
    code = FaultCode.UNMATCHED_ARGUMENTS
    title = "unmatched arguments"
    hint = "check the spelling and placement of the extra arguments"


class RequiredArgumentMissingError(ParseFault):
    code = FaultCode.REQUIRED_ARGUMENT_MISSING
    title = "required argument missing"
    hint = "provide a value for every required argument"


class MalformedInputError(ParseFault):
    code = FaultCode.MALFORMED_INPUT
    title = "malformed input"
    hint = "balance the quotes of the command line"


class MultipleOccurrencesError(ParseFault):
    code = FaultCode.MULTIPLE_OCCURRENCES
    title = "option specified multiple times"
    hint = "specify the option only once"


class ConversionError(ParseFault):
    """
    Base type for faults raised by the typed value parsers.
    """
    title = "conversion error"


class EmptyValueError(ConversionError):
    code = FaultCode.EMPTY_VALUE
    title = "empty value"


class MalformedValueError(ConversionError):
    code = FaultCode.MALFORMED_VALUE
    title = "malformed value"


class MissingDigitsError(ConversionError):
    code = FaultCode.MISSING_DIGITS
    title = "missing digits"


class DataTypeLimitError(ConversionError):
    code = FaultCode.DATA_TYPE_LIMIT
    title = "data type limit"
    hint = "use a value within the signed 64-bit range"


class UnexpectedInputError(ConversionError):
    code = FaultCode.UNEXPECTED_INPUT
    title = "unexpected input"
    hint = "use one of true, t, on, yes, y, false, f, off, no, n or an integer"


class DelegatedError(ParseFault):
    code = FaultCode.DELEGATED_ERROR
    title = "error"


def report(fault, /, *, console=Unset, **options):
    """
    print a fault with the given rendering options.

    contract
    - fault must be a ParseFault; options are merged through with_options()
      before rendering (prog, colorful, fancy, hint).
    - output goes to the module stderr console unless one is given.
    """
    if not isinstance(fault, ParseFault):
        raise TypeError("report() argument must be a parse-fault")
    coalesce(console, stderr).print(fault.with_options(**options))


__all__ = (
    "FaultCode",
    "ParseFault",
    "OptionValueExpectedError",
    "UnmatchedArgumentsError",
    "RequiredArgumentMissingError",
    "MalformedInputError",
    "MultipleOccurrencesError",
    "ConversionError",
    "EmptyValueError",
    "MalformedValueError",
    "MissingDigitsError",
    "DataTypeLimitError",
    "UnexpectedInputError",
    "DelegatedError",
    "report",
)
