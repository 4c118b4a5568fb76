# python
"""
Utility helpers behavioral tests.

Scope
- Unset sentinel semantics (falsey, singleton, copy/pickle stable).
- coalesce / mirror / pluralize.

Conventions
- Test method names follow CamelCase per project convention.
"""

import copy
import pickle
import unittest
from unittest import TestCase

from clibind.utils import Unset, UnsetType, coalesce, mirror, pluralize


class TestUnset(TestCase):
    def testUnsetIsFalsey(self):
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)

    def testUnsetIsSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testUnsetRepr(self):
        self.assertEqual(repr(Unset), "Unset")

    def testUnsetSurvivesCopyAndPickle(self):
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testUnsetNotSubclassable(self):
        with self.assertRaises(TypeError):
            class Other(UnsetType):  # NOQA
                pass

    def testUnsetJoinsUnions(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("x", str | Unset)


class TestCoalesce(TestCase):
    def testReplacesOnlyUnset(self):
        self.assertEqual(coalesce(Unset, ","), ",")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, ","))
        self.assertEqual(coalesce("", ","), "")


class TestMirror(TestCase):
    def testContainersAreFrozen(self):
        class Holder:
            items = mirror("items")
            table = mirror("table")
            plain = mirror("plain")

            def __init__(self):
                self._items = [1, 2]
                self._table = {"a": 1}
                self._plain = "text"

        holder = Holder()
        self.assertEqual(holder.items, (1, 2))
        with self.assertRaises(TypeError):
            holder.table["b"] = 2
        self.assertEqual(holder.plain, "text")
        with self.assertRaises(AttributeError):
            holder.items = ()

    def testGetterIsNamedAfterAttribute(self):
        accessor = mirror("separator")
        self.assertEqual(accessor.fget.__name__, "separator")
        self.assertEqual(accessor.fget.__qualname__, "separator")

    def testRejectsNonStringName(self):
        with self.assertRaises(TypeError):
            mirror(1)


class TestPluralize(TestCase):
    def testSuffixRules(self):
        cases = {
            (1, "error"): "1 error",
            (2, "error"): "2 errors",
            (0, "token"): "0 tokens",
            (2, "match"): "2 matches",
            (3, "entry"): "3 entries",
            (2, "day"): "2 days",
        }
        for (count, word), expected in cases.items():
            with self.subTest(count=count, word=word):
                self.assertEqual(pluralize(count, word), expected)


if __name__ == "__main__":
    unittest.main()
