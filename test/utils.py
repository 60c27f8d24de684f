"""
Utilities and logging behavioral tests.

Scope
- Validate that the package imports cleanly in a fresh interpreter.
- Validate coalesce/rename/freeze/mirror helpers.
- Validate SpecType: typenames, read-only fields, sealing, repr.
- Validate mglob module globbing against the installed package.
- Validate logger naming and handler installation.

Conventions
- Test method names follow CamelCase per project convention.
"""

import logging
import subprocess
import sys
import unittest
from pathlib import Path
from types import MappingProxyType
from unittest import TestCase

from rich.logging import RichHandler

from parlance.logger import LogObjects, get_logger, init_logger
from parlance.utils import SpecType, Unset, coalesce, freeze, mglob, mirror, rename


class TestImport(TestCase):
    """The package must import in a fresh interpreter."""

    def testFreshImport(self):
        root = Path(__file__).resolve().parents[1]
        result = subprocess.run([sys.executable, "-c", "import parlance"], cwd=root, capture_output=True, text=True)
        self.assertEqual(result.returncode, 0, result.stderr)


class TestHelpers(TestCase):
    """Behavioral tests for small helpers."""

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)

    def testRename(self):
        @rename("h")
        def f():
            pass

        self.assertEqual(f.__name__, "h")
        self.assertEqual(f.__qualname__, "h")

    def testRenameRejectsBadInput(self):
        with self.assertRaises(TypeError):
            rename("")
        with self.assertRaises(TypeError):
            rename("h")("not callable")

    def testFreeze(self):
        self.assertEqual(freeze([1, 2]), (1, 2))
        self.assertIsInstance(freeze({"a": 1}), MappingProxyType)
        self.assertEqual(freeze({1, 2}), frozenset({1, 2}))
        self.assertEqual(freeze("text"), "text")

    def testMirror(self):
        class Box:
            value = mirror("value")

            def __init__(self):
                self._value = 3

        self.assertEqual(Box().value, 3)
        with self.assertRaises(AttributeError):
            Box().value = 4


class TestSpecType(TestCase):
    """Behavioral tests for the definition metaclass."""

    def setUp(self):
        class RollSpec(metaclass=SpecType):
            __introspectable__ = ("sides", "count")
            __displayable__ = ("sides",)

            def __init__(self, sides, count=1):
                self._sides = sides
                self._count = count

        self.cls = RollSpec

    def testTypename(self):
        self.assertEqual(self.cls.__typename__, "roll-spec")

    def testFieldsAreReadOnly(self):
        spec = self.cls(6)
        self.assertEqual(spec.sides, 6)
        with self.assertRaises(AttributeError):
            spec.sides = 8

    def testSealedAfterConstruction(self):
        spec = self.cls(6)
        with self.assertRaises(AttributeError):
            spec._sides = 8
        self.assertEqual(spec.sides, 6)

    def testReprUsesDisplayableFields(self):
        self.assertEqual(repr(self.cls(6, 2)), "roll-spec(sides=6)")
        self.assertEqual(list(self.cls(6, 2).__rich_repr__()), [("sides", 6)])


class TestModuleGlob(TestCase):
    """Behavioral tests for mglob()."""

    def testConcreteNameIsReturnedAsIs(self):
        self.assertEqual(mglob("parlance.matching"), ["parlance.matching"])

    def testChildrenWildcard(self):
        names = mglob("parlance.*")
        self.assertIn("parlance.matching", names)
        self.assertIn("parlance.registry", names)
        self.assertNotIn("parlance", names)

    def testSegmentPattern(self):
        self.assertEqual(mglob("parlance.[mr]e*"), ["parlance.registry", "parlance.results"])

    def testRecursiveWildcard(self):
        names = mglob("parlance.**")
        self.assertIn("parlance", names)
        self.assertIn("parlance.utils", names)

    def testMissingPackageIsEmpty(self):
        self.assertEqual(mglob("parlance_missing_package.*"), [])

    def testWildcardOnlyPrefixRejected(self):
        with self.assertRaises(ValueError):
            mglob("*.commands")


class TestLogger(TestCase):
    """Behavioral tests for logger helpers."""

    def tearDown(self):
        root = logging.getLogger("parlance")
        for handler in LogObjects.handlers:
            root.removeHandler(handler)
        LogObjects.handlers.clear()
        root.setLevel(logging.NOTSET)

    def testNamesAreNamespaced(self):
        self.assertEqual(get_logger().name, "parlance")
        self.assertEqual(get_logger("registry").name, "parlance.registry")
        self.assertEqual(get_logger("parlance.matching").name, "parlance.matching")

    def testInitInstallsRichHandlerOnce(self):
        init_logger(logging.DEBUG)
        init_logger(logging.WARNING)
        root = logging.getLogger("parlance")
        handlers = [handler for handler in root.handlers if isinstance(handler, RichHandler)]
        self.assertEqual(len(handlers), 1)
        self.assertEqual(root.level, logging.WARNING)


if __name__ == "__main__":
    unittest.main()
