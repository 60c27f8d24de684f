"""
Parlance internal helpers.

Contents
- Unset: "argument not given" marker, distinct from None and every other
  falsy value. coalesce() turns it into a concrete fallback.
- rename("name"): decorator fixing __name__/__qualname__ of generated
  callables so tracebacks and reprs stay readable.
- freeze(): one-level read-only copy of lists, dicts and sets.
- mirror("field"): read-only property over the private "_field" slot.
- SpecType: metaclass shared by every definition object (argument types,
  arguments, groups, command versions, commands).
- mglob("pkg.*"): expand a dotted module pattern into importable names.

    >>> coalesce(Unset, 3), coalesce(None, 3)
    (3, None)
    >>> freeze([1, 2])
    (1, 2)
"""
import fnmatch
import functools
import importlib
import pkgutil
import re
from collections.abc import Mapping, Sequence, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker.

    There is exactly one instance per process. It is falsy, prints as
    "Unset", pickles back to the same object, and combines with other types
    in unions (str | Unset) so it can be used directly in isinstance() checks.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError(f"{cls.__name__!r} cannot subclass the Unset marker type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    `object`, or `default` when `object` is Unset. None and other falsy values pass through.
    """
    return default if object is Unset else object


def rename(name, /):
    """
    Decorator: give the wrapped callable a fixed __name__ and __qualname__.
    """
    if not isinstance(name, str) or not name:
        raise TypeError("rename() expects a non-empty string")

    def decorator(function):
        if not callable(function):
            raise TypeError("rename() can only decorate callables")
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def freeze(object, /):
    """
    One level deep read-only copy: sequences become tuples, mappings become
    mapping proxies over a fresh dict, sets become frozensets. Strings and
    anything else are returned unchanged.
    """
    match object:
        case str() | bytes() | bytearray():
            return object
        case Sequence():
            return tuple(object)
        case Mapping():
            return MappingProxyType(dict(object))
        case Set():
            return frozenset(object)
    return object


def mirror(name, /):
    """
    Read-only property named `name` returning the instance's "_{name}" attribute.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() expects the field name as a string")
    field = "_" + name

    @rename(name)
    def getter(self):
        return getattr(self, field)

    return property(getter)


class SpecType(type):
    """
    Metaclass for definition objects.

    A class using it gets
    - __typename__: the class name in lower hyphen case (ArgumentGroup →
      "argument-group"), used in every error message about the definition.
    - one read-only property per entry of __introspectable__.
    - __repr__ and __rich_repr__ built from __displayable__, or from
      __introspectable__ when no narrower list is given.
    - sealed instances: once the constructor returns, setting any attribute
      raises AttributeError, so one definition can serve any number of
      concurrent match attempts.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        fields = namespace.get("__introspectable__", ())
        namespace = {
            **namespace,
            "__typename__": "-".join(part.lower() for part in re.findall(r"[A-Z][^A-Z]*|[^A-Z]+", name)),
            **{field: mirror(field) for field in fields},
        }
        self = super().__new__(cls, name, bases, namespace)

        @rename("__rich_repr__")
        def __rich_repr__(self):
            shown = type(self).__displayable__
            for field in type(self).__introspectable__ if shown is Unset else shown:
                yield field, getattr(self, field)

        @rename("__repr__")
        def __repr__(self):
            pairs = ", ".join(f"{field}={value!r}" for field, value in self.__rich_repr__())
            return f"{type(self).__typename__}({pairs})"

        @rename("__setattr__")
        def __setattr__(self, name, value, /):
            if self.__dict__.get("__sealed__"):
                raise AttributeError(f"cannot assign {name!r}: {type(self).__typename__} definitions are immutable")
            object.__setattr__(self, name, value)

        self.__rich_repr__ = __rich_repr__
        self.__repr__ = __repr__
        if "__setattr__" not in namespace:
            self.__setattr__ = __setattr__
        return self

    def __call__(cls, *args, **kwargs):
        instance = super().__call__(*args, **kwargs)
        instance.__dict__["__sealed__"] = True
        return instance


def _match_segments(pattern, parts):
    """
    Match name segments against pattern segments; "**" spans any number of segments.
    """
    if not pattern:
        return not parts
    head, *rest = pattern
    if head == "**":
        return any(_match_segments(rest, parts[skip:]) for skip in range(len(parts) + 1))
    return bool(parts) and fnmatch.fnmatchcase(parts[0], head) and _match_segments(rest, parts[1:])


def mglob(source, /):
    """
    Expand a dotted module pattern into sorted, fully qualified module names.

    Each segment is a shell-style pattern ("*", "?", "[abc]", "[!abc]") that
    never crosses a dot; a segment that is exactly "**" stands for any number
    of whole segments. The pattern must begin with a concrete package name,
    which is imported to walk its submodules. A pattern without wildcards is
    returned as-is; a package that cannot be imported yields [].

        mglob("bot.commands.*")   # direct children of bot.commands
        mglob("bot.**.admin")     # every "admin" module below bot
    """
    if not isinstance(source, str):
        raise TypeError("mglob() expects a string pattern")
    if not (source := source.strip()):
        raise ValueError("mglob() pattern is empty")

    pattern = source.split(".")
    if all(re.fullmatch(r"(?!\d)\w+", segment) for segment in pattern):
        return [source]

    concrete = []
    for segment in pattern:
        if not re.fullmatch(r"(?!\d)\w+", segment):
            break
        concrete.append(segment)
    if not concrete:
        raise ValueError(f"mglob() pattern {source!r} must start with a package name")

    try:
        package = importlib.import_module(root := ".".join(concrete))
    except ImportError:
        return []

    candidates = [root]
    if hasattr(package, "__path__"):
        candidates += [info.name for info in pkgutil.walk_packages(package.__path__, root + ".")]

    return sorted(name for name in candidates if _match_segments(pattern, name.split(".")))


__all__ = (
    "coalesce",
    "rename",
    "freeze",
    "mirror",
    "mglob",
    "UnsetType",
    "SpecType",
    "Unset",
)
