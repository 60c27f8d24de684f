"""
Parlance faults (match failures) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing failures.
- CommandException: base type that carries message + read-only options and
  knows how to render itself through rich.
- MatchFailure / ValidationError: the semantic failure channel of the matcher.
  Failures are *returned* as values by type matchers and groups; they are
  stamped on their way up with the offending argument, type and version
  (copy.replace) and only raised when a host asks for it.
- CommandExit: all failures collected for one message, as an ExceptionGroup.
- trigger(): central entry point to surface any fault (shell/fancy/colorful).
- Diagnostics: the sink a Command reports to when none of its versions ran.

Channels
- A structural non-match is never a fault; it is parlance.results.NoMatch.
- A malformed definition is a programmer error (TypeError/ValueError raised at
  construction) and never becomes a fault either.

Host hooks (read from __main__ when present)
- __prog__: program label in rendered headers.
- __styles__: style overrides for rendering.
- __codes__: FaultCode → label remapping.
- __docs__: FaultCode → short documentation string.
"""
import copy
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .logger import get_logger
from .utils import Unset

console = Console(stderr=True)
logger = get_logger("faults")


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - integers (2111x): INTEGER_TOO_SMALL, INTEGER_TOO_LARGE
    - text (2112x): TEXT_TOO_LONG
    - generic validation (2119x): INVALID_VALUE
    - dispatch (2120x): NO_VERSION_MATCHED

    normalize() allows host remapping to custom labels while keeping codes stable.
    """
    # --- integer validation ---
    INTEGER_TOO_SMALL  = 21111
    INTEGER_TOO_LARGE  = 21112

    # --- text validation ---
    TEXT_TOO_LONG      = 21121

    # --- generic validation ---
    INVALID_VALUE      = 21191

    # --- dispatch ---
    NO_VERSION_MATCHED = 21201

    def normalize(self):
        """
        label shown to users: __main__.__codes__[self] when the host defines it, else the number.
        """
        labels = getattr(__import__("__main__"), "__codes__", {})
        return str(labels.get(self, self.value))


def _styler(options, defaults):
    styles = defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))
    colorful = options.get("colorful", True)

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    return styler, text


class CommandException(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message or ""

    def __rich__(self):
        styler, text = _styler(self.options, {
            # header parts
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",

            # body
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        })

        prog = text(getattr(__import__("__main__"), "__prog__", self.options.get("prog", "parlance")), styler("prog-name"))
        code = self.options.get("code", FaultCode.INVALID_VALUE)

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize(), styler("code")),
            " | ",
            text(self.options.get("title", "invalid value").title(), styler("error-title")),
            " ]"
        )
        message = text(self.describe(), styler("error-message"))
        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if self.options.get("fancy", False):
            width = None
            if ratio := self.options.get("ratio"):
                width = int((console.width - 4) * ratio)
            return Panel(Group(*renders), title=header, title_align="left", width=width)

        return Group(header, *renders)

    def describe(self):
        """
        Return the message as shown to users (subclasses add context).
        """
        return str(self)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class MatchFailure(CommandException):
    """
    A failure produced while matching a message against a command.

    Options carried (all optional until the relevant layer stamps them)
    - argument: the offending Argument
    - type: the offending ArgumentType
    - version: the offending CommandVersion
    - token: the text that was being parsed
    """

    @property
    def argument(self):
        return self.options.get("argument")

    @property
    def type(self):
        return self.options.get("type")

    @property
    def version(self):
        return self.options.get("version")

    @property
    def token(self):
        return self.options.get("token")

    def describe(self):
        if (argument := self.argument) is not None:
            return f"argument {argument.name!r}: {self.message}"
        return str(self)

    def __repr__(self):
        return f"{type(self).__name__}({self.describe()!r})"


class ValidationError(MatchFailure): ...
class OutOfRangeError(ValidationError): ...
class TooLongError(ValidationError): ...


class CommandExit(ExceptionGroup[MatchFailure]):
    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "no version matched", tuple(exceptions))

    def __init__(self, exceptions, **options):
        super().__init__("no version matched", tuple(exceptions))
        self.options = MappingProxyType(options)

    def __rich__(self):
        styler, text = _styler(self.options, {
            "prog-name": "bold #E6E6F0",
            "title": "bold #FF4DA6",
        })

        prog = text(getattr(__import__("__main__"), "__prog__", self.options.get("prog", "parlance")), styler("prog-name"))
        header = Text.assemble("[ ", prog, " — ", text(self.message.title(), styler("title")), " ]")

        renders = []
        for exception in self.exceptions:
            renders.append(copy.replace(exception, ratio=2/3, fancy=self.options.get("fancy", False), colorful=self.options.get("colorful", True)))

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


def trigger(fault, /, **options):
    """
    clone `fault` with the given runtime options, then surface it.

    with shell=True the clone is printed on the stderr console; otherwise it is
    raised. anything lacking __trigger__/__replace__ is a TypeError.
    """
    if not all(callable(getattr(fault, hook, None)) for hook in ("__trigger__", "__replace__")):
        raise TypeError(f"cannot trigger {type(fault).__name__!r} objects")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code from __main__.__docs__.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


class Diagnostics:
    """
    Default diagnostics sink for commands.

    report(errors) is called with the ordered failures of every version of a
    command, and only when none of its versions executed. The failures are
    logged, then bundled into a CommandExit and triggered:
    - shell=True: rendered on the stderr console (the message is dropped).
    - shell=False: the CommandExit is raised to the caller of Command.check().
    """

    def __init__(self, *, shell=True, fancy=False, colorful=True):
        self.shell = bool(shell)
        self.fancy = bool(fancy)
        self.colorful = bool(colorful)

    def report(self, errors, /):
        if not (errors := tuple(errors)):
            return
        options = {"prog": prog} if (prog := errors[0].options.get("prog")) else {}
        for error in errors:
            logger.error("%s", error.describe())
        trigger(CommandExit(errors), shell=self.shell, fancy=self.fancy, colorful=self.colorful, **options)

    def __repr__(self):
        return f"diagnostics(shell={self.shell!r}, fancy={self.fancy!r}, colorful={self.colorful!r})"


__all__ = (
    "FaultCode",
    "CommandException",
    "MatchFailure",
    "ValidationError",
    "OutOfRangeError",
    "TooLongError",
    "CommandExit",
    "Diagnostics",
    "trigger",
    "getdoc",
)
