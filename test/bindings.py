# python
"""
Bindings module behavioral tests.

Scope
- Binding construction: name classification, metadata validation, defaults.
- copy.replace resolution (name/shape/target) and derived properties.
- option() field factory: metadata wiring and dataclass defaults.

Conventions
- Test method names follow CamelCase per project convention.
"""

import copy
import dataclasses
import unittest
from unittest import TestCase

from clibind import BINDING, Binding, Shape, bindingof, option
from clibind.utils import Unset


class TestBinding(TestCase):
    """Behavioral tests for Binding declarations."""

    def testShortAndLongNamesAreSeparated(self):
        binding = Binding("--verbose", "-v")
        self.assertEqual(binding.short, "-v")
        self.assertEqual(binding.long, "--verbose")
        self.assertEqual(binding.names, ("-v", "--verbose"))

    def testUnicodeLongName(self):
        self.assertEqual(Binding("--größe").long, "--größe")

    def testMalformedNamesRejected(self):
        for name in ("verbose", "-vv", "---x", "--_x", "--x_y", "-1", "--", "  "):
            with self.subTest(name=name):
                with self.assertRaises(ValueError):
                    Binding(name)

    def testNonStringNameRejected(self):
        with self.assertRaises(TypeError):
            Binding(1)

    def testSecondShortOrLongNameRejected(self):
        with self.assertRaises(ValueError):
            Binding("-a", "-b")
        with self.assertRaises(ValueError):
            Binding("--alpha", "--beta")

    def testDefaultsWhenOmitted(self):
        binding = Binding("--x")
        self.assertFalse(binding.required)
        self.assertIs(binding.default, Unset)
        self.assertIsNone(binding.env)
        self.assertIsNone(binding.index)
        self.assertEqual(binding.separator, ";")
        self.assertEqual(binding.help, "")
        self.assertIsNone(binding.metavar)
        self.assertIsNone(binding.type)
        self.assertIsNone(binding.name)
        self.assertIsNone(binding.shape)

    def testNoneIsADeclaredDefault(self):
        self.assertIsNone(Binding("--x", default=None).default)

    def testIndexValidation(self):
        self.assertEqual(Binding(index=0).index, 0)
        with self.assertRaises(ValueError):
            Binding(index=-1)
        with self.assertRaises(TypeError):
            Binding(index=True)
        with self.assertRaises(TypeError):
            Binding(index="0")

    def testSeparatorValidation(self):
        self.assertEqual(Binding("--x", separator="").separator, "")
        with self.assertRaises(ValueError):
            Binding("--x", separator=";;")
        with self.assertRaises(TypeError):
            Binding("--x", separator=None)

    def testEnvValidation(self):
        self.assertEqual(Binding("--x", env="APP_X").env, "APP_X")
        for env in ("", "APP X", "A=B"):
            with self.subTest(env=env):
                with self.assertRaises(ValueError):
                    Binding("--x", env=env)
        with self.assertRaises(TypeError):
            Binding("--x", env=3)

    def testRequiredMustBeBoolean(self):
        with self.assertRaises(TypeError):
            Binding("--x", required="yes")

    def testHelpAndMetavarAreTrimmed(self):
        binding = Binding(index=0, help="  the source  ", metavar=" SRC ")
        self.assertEqual(binding.help, "the source")
        self.assertEqual(binding.metavar, "SRC")
        with self.assertRaises(ValueError):
            Binding(index=0, metavar="  ")

    def testTypeMustBeCallable(self):
        with self.assertRaises(TypeError):
            Binding("--x", type="int")

    def testReplaceResolvesFields(self):
        binding = Binding("-c", "--count", default=1)
        resolved = copy.replace(binding, name="count", shape=Shape.SCALAR, target=int)
        self.assertEqual(resolved.name, "count")
        self.assertIs(resolved.shape, Shape.SCALAR)
        self.assertIs(resolved.target, int)
        self.assertEqual(resolved.names, ("-c", "--count"))
        self.assertEqual(resolved.default, 1)
        self.assertIsNone(binding.name)

    def testReplaceNames(self):
        resolved = copy.replace(Binding(), names=("--dry-run",))
        self.assertEqual(resolved.long, "--dry-run")

    def testReplaceRejectsUnknownFields(self):
        with self.assertRaises(TypeError):
            copy.replace(Binding("--x"), colour="red")

    def testDisplayPreference(self):
        self.assertEqual(Binding("-v", "--verbose").display, "--verbose")
        self.assertEqual(Binding("-v").display, "-v")
        self.assertEqual(Binding(index=1, metavar="URL").display, "<URL>")
        self.assertEqual(Binding(index=2).display, "<arg2>")

    def testPositionalProperty(self):
        self.assertTrue(Binding("--source", index=0).positional)
        self.assertFalse(Binding("--source").positional)

    def testBindingNotSubclassable(self):
        with self.assertRaises(TypeError):
            class Other(Binding):  # NOQA
                pass

    def testReprListsDisplayableFields(self):
        text = repr(Binding("-v", "--verbose"))
        self.assertTrue(text.startswith("binding("))
        self.assertIn("long='--verbose'", text)
        self.assertEqual(Binding.__repr__.__qualname__, "Binding.__repr__")
        self.assertEqual(Binding.long.fget.__name__, "long")


class TestOption(TestCase):
    """Behavioral tests for the option() field factory."""

    def testOptionCarriesBinding(self):
        @dataclasses.dataclass
        class Record:
            verbose: bool = option("-v", help="chatty")

        field, = dataclasses.fields(Record)
        binding = bindingof(field)
        self.assertIs(field.metadata[BINDING], binding)
        self.assertEqual(binding.short, "-v")
        self.assertEqual(binding.help, "chatty")

    def testDeclaredDefaultBecomesFieldDefault(self):
        @dataclasses.dataclass
        class Record:
            count: int = option("--count", default=3)
            name: str = option("--name")

        record = Record()
        self.assertEqual(record.count, 3)
        self.assertIsNone(record.name)

    def testMutableDefaultIsCopied(self):
        @dataclasses.dataclass
        class Record:
            tags: list[str] = option("--tags", default=["a"])

        first, second = Record(), Record()
        first.tags.append("b")
        self.assertEqual(second.tags, ["a"])
        self.assertEqual(bindingof(dataclasses.fields(Record)[0]).default, ["a"])

    def testPlainFieldHasNoBinding(self):
        @dataclasses.dataclass
        class Record:
            note: str = "plain"

        self.assertIsNone(bindingof(dataclasses.fields(Record)[0]))

    def testBindingofRejectsNonField(self):
        with self.assertRaises(TypeError):
            bindingof("note")

    def testInvalidMetadataFailsAtDeclaration(self):
        with self.assertRaises(ValueError):
            option("verbose")


if __name__ == "__main__":
    unittest.main()
