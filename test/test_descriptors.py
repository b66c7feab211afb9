"""
Descriptor and utility tests.

Scope
- Validate FlagSpec / ParameterDescriptor / TaskDescriptor validation rules.
- Validate structural equality, read-only fields and sealing.
- Validate TaskRegistry iteration order.
- Validate the Unset sentinel helpers.
"""
import unittest
from unittest import TestCase

from taskonaut.descriptors import FlagSpec, ParameterDescriptor, ParamType, TaskDescriptor, TaskRegistry
from taskonaut.utils import Unset, UnsetType, coalesce, identifier


class TestFlagSpec(TestCase):

    def testNamesOrder(self):
        flag = FlagSpec("--name", "-n", ["--who", "--whom"])
        self.assertEqual(flag.names, ("--name", "-n", "--who", "--whom"))
        self.assertEqual(FlagSpec("--name").names, ("--name",))

    def testAliasesCollapse(self):
        self.assertEqual(FlagSpec("--name", aliases=["--who", "--who"]).aliases, ("--who",))

    def testInvalidTokens(self):
        with self.assertRaises(ValueError):
            FlagSpec("name")
        with self.assertRaises(ValueError):
            FlagSpec("--name", "--")
        with self.assertRaises(ValueError):
            FlagSpec("--name", "-nn")
        with self.assertRaises(ValueError):
            FlagSpec("--name", aliases=["-w"])
        with self.assertRaises(TypeError):
            FlagSpec("--name", aliases="--who")

    def testFieldsAreReadOnly(self):
        flag = FlagSpec("--name")
        with self.assertRaises(AttributeError):
            flag.long = "--other"


class TestParameterDescriptor(TestCase):

    def testDefaults(self):
        param = ParameterDescriptor("name")
        self.assertEqual(param.type, ParamType.STRING)
        self.assertTrue(param.required)
        self.assertFalse(param.rest)
        self.assertIsNone(param.flag)

    def testTypeFromString(self):
        self.assertIs(ParameterDescriptor("count", "number").type, ParamType.NUMBER)
        with self.assertRaises(ValueError):
            ParameterDescriptor("count", "integer")

    def testRestIsNeverRequired(self):
        self.assertFalse(ParameterDescriptor("files", rest=True, required=True).required)

    def testRestCannotCarryFlag(self):
        with self.assertRaises(TypeError):
            ParameterDescriptor("files", rest=True, flag=FlagSpec("--files"))

    def testNameMustBeIdentifier(self):
        with self.assertRaises(ValueError):
            ParameterDescriptor("dry-run")

    def testStructuralEquality(self):
        self.assertEqual(
            ParameterDescriptor("name", flag=FlagSpec("--name", "-n")),
            ParameterDescriptor("name", flag=FlagSpec("--name", "-n")),
        )
        self.assertNotEqual(ParameterDescriptor("name"), ParameterDescriptor("name", required=False))

    def testSealed(self):
        with self.assertRaises(TypeError):
            class Custom(ParameterDescriptor):  # NOQA: F-841
                pass


class TestTaskDescriptor(TestCase):

    def testParamsAreTuple(self):
        task = TaskDescriptor("Say hello", [ParameterDescriptor("name")])
        self.assertIsInstance(task.params, tuple)
        self.assertEqual(task.description, "Say hello")
        self.assertFalse(task.reflected)

    def testRestMustBeLast(self):
        with self.assertRaises(ValueError):
            TaskDescriptor("", (ParameterDescriptor("files", rest=True), ParameterDescriptor("name")))

    def testRejectsOtherParams(self):
        with self.assertRaises(TypeError):
            TaskDescriptor("", ("name",))

    def testRepr(self):
        self.assertTrue(repr(TaskDescriptor("x")).startswith("task-descriptor(description='x'"))


class TestTaskRegistry(TestCase):

    def testIterationOrder(self):
        hello, migrate = TaskDescriptor("hello"), TaskDescriptor("migrate")
        registry = TaskRegistry({"hello": hello}, {"db": {"migrate": migrate}}, "Tasks")
        self.assertEqual(list(registry), [("hello", hello), ("db:migrate", migrate)])
        self.assertEqual(len(registry), 2)
        self.assertEqual(registry.header_doc, "Tasks")

    def testEmpty(self):
        registry = TaskRegistry()
        self.assertEqual(registry.root, {})
        self.assertEqual(registry.namespaces, {})
        self.assertIsNone(registry.header_doc)

    def testNamespacesMustBeMappings(self):
        with self.assertRaises(TypeError):
            TaskRegistry(namespaces={"db": ["migrate"]})


class TestUnset(TestCase):

    def testSingletonAndFalsy(self):
        self.assertIs(UnsetType(), Unset)
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)

    def testIdentifier(self):
        self.assertTrue(identifier("Tasks"))
        self.assertFalse(identifier("_private"))
        self.assertFalse(identifier("__init__"))
        self.assertFalse(identifier("not valid"))


if __name__ == "__main__":
    unittest.main()
