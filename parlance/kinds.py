r"""
Parlance leaf types: turn one token (or a widened run of tokens) into a value.

Contract
- parse(token, context) answers exactly one of:
  • Success(value): the token is a valid value of this type.
  • NoMatch: the token does not have this type's shape (e.g. "abc" for an integer).
  • ValidationError: the shape fits but a constraint does not (range, length).
- parse is a pure function of the token. `context` is the opaque, read-only
  message context handed through from the dispatcher; the built-ins ignore it.

Built-ins
- IntegerType(min=..., max=...): ASCII digits only ("[0-9]+"), inclusive bounds.
- TextType(max_length=...): any non-empty text, optional length bound.

Custom types subclass ArgumentType and implement parse(); the argument layer
rejects (TypeError) anything a type returns outside the three variants.
"""
import re
from typing import final

from .faults import FaultCode, OutOfRangeError, TooLongError
from .results import NoMatch, Success
from .utils import *


class ArgumentType(metaclass=SpecType):
    """
    Base of every leaf type.

    Attributes
    - name: short display label (e.g. "Integer").
    - summary: one-line description for help output.
    """

    __introspectable__ = (
        "name",
        "summary",
    )

    def __init__(self, name, summary):
        if not isinstance(name, str) or not (name := name.strip()):
            raise TypeError(f"{type(self).__typename__} 'name' must be a non-empty string")
        if not isinstance(summary, str):
            raise TypeError(f"{type(self).__typename__} 'summary' must be a string")
        self._name = name
        self._summary = summary.strip()

    def parse(self, token, context=None, /):
        raise NotImplementedError(f"{type(self).__typename__} does not implement parse()")


@final
class IntegerType(ArgumentType):
    """
    A whole, non-negative number written with ASCII digits.

    - "abc", "-3", "1.5" → NoMatch (not an integer shape)
    - outside [min, max] → OutOfRangeError
    """

    __introspectable__ = (
        "name",
        "summary",
        "min",
        "max",
    )

    pattern = re.compile(r"[0-9]+")

    def __init__(self, min=Unset, max=Unset):
        super().__init__("Integer", "A whole number.")
        for label, bound in (("min", min), ("max", max)):
            if not isinstance(bound, int | Unset) or isinstance(bound, bool):
                raise TypeError(f"{type(self).__typename__} {label!r} must be an integer")
        if min is not Unset and max is not Unset and min > max:
            raise ValueError(f"{type(self).__typename__} 'min' cannot be greater than 'max'")
        self._min = coalesce(min)
        self._max = coalesce(max)

    def parse(self, token, context=None, /):
        if not self.pattern.fullmatch(token):
            return NoMatch

        number = int(token)

        if self.min is not None and number < self.min:
            return OutOfRangeError(
                f"expected integer to be at least `{self.min:,}`, got `{token}`",
                code=FaultCode.INTEGER_TOO_SMALL,
                title="integer too small",
                hint=f"use a number between {self._bounds()}",
                token=token,
            )

        if self.max is not None and number > self.max:
            return OutOfRangeError(
                f"expected integer to be at most `{self.max:,}`, got `{token}`",
                code=FaultCode.INTEGER_TOO_LARGE,
                title="integer too large",
                hint=f"use a number between {self._bounds()}",
                token=token,
            )

        return Success(number)

    def _bounds(self):
        low = "0" if self.min is None else f"{self.min:,}"
        high = "∞" if self.max is None else f"{self.max:,}"
        return f"{low} and {high}"


@final
class TextType(ArgumentType):
    """
    Any non-empty text; when widened by the matcher it spans several tokens.
    """

    __introspectable__ = (
        "name",
        "summary",
        "max_length",
    )

    pattern = re.compile(r".+")

    def __init__(self, max_length=Unset):
        super().__init__("Text", "Any text with spaces.")
        if not isinstance(max_length, int | Unset) or isinstance(max_length, bool):
            raise TypeError(f"{type(self).__typename__} 'max_length' must be an integer")
        if max_length is not Unset and max_length < 1:
            raise ValueError(f"{type(self).__typename__} 'max_length' must be a positive integer")
        self._max_length = coalesce(max_length)

    def parse(self, token, context=None, /):
        if not self.pattern.fullmatch(token):
            return NoMatch

        if self.max_length is not None and len(token) > self.max_length:
            return TooLongError(
                f"expected text to be at most `{self.max_length:,}` characters long, got {len(token):,}",
                code=FaultCode.TEXT_TOO_LONG,
                title="text too long",
                hint="shorten the text",
                token=token,
            )

        return Success(token)


__all__ = (
    "ArgumentType",
    "IntegerType",
    "TextType",
)
