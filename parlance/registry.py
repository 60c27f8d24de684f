"""
Parlance command registry: a package of command modules, loaded on demand.

Layout
    bot/commands/
        __init__.py
        wyr.py        # defines exactly one top-level Command
        roll.py

    registry = Registry("bot.commands")
    registry.load_all()                  # {'roll': command(...), 'wyr': command(...)}
    registry.dispatch("c.wyr a or b")    # -> the wyr Command, after its handler ran

Rules
- A command id is the module name relative to the source package ("wyr").
- load(id) answers None when the module does not exist, when the id is already
  loaded, or when the module defines no Command. A module defining more than
  one is a TypeError.
- reload(id) re-executes the module through importlib.reload.
- The loaded set is an immutable snapshot replaced whole under a lock; readers
  (dispatch, commands, iteration) never take the lock.
"""
import importlib
import inspect
import sys
import threading
from types import MappingProxyType

from .commands import Command
from .logger import get_logger
from .utils import *

logger = get_logger("registry")


class Registry:
    """
    Loaded commands of one source package, keyed by command id, in load order.
    """

    def __init__(self, source, /):
        if not isinstance(source, str) or not (source := source.strip()):
            raise TypeError("registry source must be a non-empty module name")
        self._source = source
        self._lock = threading.Lock()
        self._loaded = MappingProxyType({})

    @property
    def source(self):
        return self._source

    @property
    def commands(self):
        """
        Read-only snapshot of the loaded commands (id → Command).
        """
        return self._loaded

    def __len__(self):
        return len(self._loaded)

    def __iter__(self):
        return iter(self._loaded.values())

    def __contains__(self, id):
        return id in self._loaded

    def __repr__(self):
        return f"registry({self._source!r}, loaded={list(self._loaded)!r})"

    def _qualify(self, id):
        if not isinstance(id, str) or not (id := id.strip()):
            raise TypeError("command id must be a non-empty string")
        return f"{self._source}.{id}"

    def _extract(self, module):
        commands = [object for _, object in inspect.getmembers(module) if isinstance(object, Command)]
        match commands:
            case []:
                return None
            case [command]:
                return command
            case _:
                raise TypeError(f"module {module.__name__!r} defines {len(commands)} commands, expected one")

    def _import(self, qualname, *, fresh=False):
        try:
            if fresh and qualname in sys.modules:
                return importlib.reload(sys.modules[qualname])
            return importlib.import_module(qualname)
        except ModuleNotFoundError as exception:
            if exception.name not in (qualname, self._source):
                raise
            logger.warning("no command module named %r", qualname)
            return None

    def _install(self, id, module):
        if (command := self._extract(module)) is None:
            logger.warning("module %r defines no command", module.__name__)
            return None
        with self._lock:
            if id in self._loaded:
                logger.info("command %r is already loaded", id)
                return None
            self._loaded = MappingProxyType(dict(self._loaded) | {id: command})
        logger.info("loaded command %r (%s)", id, command.name)
        return command

    def load(self, id, /):
        """
        Import `source.id` and register the Command it defines.

        Returns the Command, or None when nothing was loaded.
        """
        qualname = self._qualify(id)
        if id in self._loaded:
            logger.info("command %r is already loaded", id)
            return None
        if (module := self._import(qualname)) is None:
            return None
        return self._install(id, module)

    def unload(self, id, /):
        """
        Remove a command from the registry; returns it, or None if it was not loaded.
        """
        self._qualify(id)
        with self._lock:
            if (command := self._loaded.get(id)) is None:
                return None
            self._loaded = MappingProxyType({key: value for key, value in self._loaded.items() if key != id})
        logger.info("unloaded command %r", id)
        return command

    def reload(self, id, /):
        """
        Unload a command and load it again from freshly executed source.

        Returns the new Command, or None if `id` was not loaded.
        """
        if self.unload(id) is None:
            return None
        if (module := self._import(self._qualify(id), fresh=True)) is None:
            return None
        return self._install(id, module)

    def load_all(self):
        """
        Load every direct submodule of the source package.

        Returns a read-only mapping of the commands loaded by this call.
        """
        loaded = {}
        for qualname in mglob(f"{self._source}.*"):
            id = qualname.removeprefix(self._source + ".")
            if (command := self.load(id)) is not None:
                loaded[id] = command
        return MappingProxyType(loaded)

    def unload_all(self):
        for id in tuple(self._loaded):
            self.unload(id)

    def reload_all(self):
        for id in tuple(self._loaded):
            self.reload(id)

    def dispatch(self, text, context=None, /):
        """
        Offer a message to every loaded command, in load order.

        Returns the first Command whose handler ran, or None.
        """
        for command in self._loaded.values():
            if command.check(text, context):
                return command
        return None


__all__ = (
    "Registry",
)
