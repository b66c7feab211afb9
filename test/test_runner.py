"""
Runner tests: task file loading, dispatch, binding, help views and faults.

Conventions
- Every test writes a real task file into a temporary directory and invokes the
  Runner with a token list or a shell-like string.
- Tasks return values so dispatch can be asserted without capturing output.
"""
import io
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest import TestCase

from taskonaut import (
    Context, MissingArgumentError, NotCallableError, PrivateAccessError, Runner, TaskFailedError,
    TasksNotFoundError, TasksUnloadableError, TypeMismatchError, UnknownNamespaceError, UnknownTaskError,
    invoke,
)
from taskonaut.runner import split_command

TASKS = '''
import asyncio

from taskonaut import Context


class DbNamespace:
    def migrate(self, c: Context, direction: str = "up"):
        """Run migrations"""
        return f"migrate {direction}"

    def _helper(self, c: Context):
        """Private helper"""
        return "helper"


class Plugin:
    def sync(self, c, *args):
        return list(args)


class Base:
    def inherited(self, c, *args):
        return "inherited"


def _unused():
    ghost = DbNamespace()


class Tasks(Base):
    """
    Fixture tasks
    """

    db = DbNamespace()
    plugin = Plugin()
    value = 3

    def hello(self, c: Context, name: str, count: int = 1):
        """
        Say hello
        @flag name -n
        """
        return [name] * count

    async def fetch(self, c: Context, url: str):
        """Fetch a url"""
        await asyncio.sleep(0)
        return url.upper()

    def install(self, c: Context, *packages: str):
        """Install packages"""
        return list(packages)

    def build(self, c: Context, target: str = "all", *, dry_run: bool = False):
        """
        Build a target
        @flag dry_run -n --dry-run
        """
        return target, dry_run

    def search(self, c: Context, params: dict):
        """Search with a JSON payload"""
        return params

    def context(self, c: Context):
        """Return the context"""
        return c

    def fail(self, c: Context):
        """Always fails"""
        raise RuntimeError("boom")

    def _private(self, c: Context):
        """Hidden"""
'''


class RunnerTestCase(TestCase):

    def setUp(self):
        self.directory = tempfile.TemporaryDirectory()
        self.addCleanup(self.directory.cleanup)
        self.path = Path(self.directory.name) / "tasks.py"
        self.path.write_text(TASKS, encoding="utf-8")
        self.runner = Runner(self.path, colorful=False)

    def write(self, name, text):
        path = Path(self.directory.name) / name
        path.write_text(text, encoding="utf-8")
        return path

    def output(self, prompt, runner=None):
        stdout = io.StringIO()
        with redirect_stdout(stdout):
            invoke(runner or self.runner, prompt)
        return stdout.getvalue()


class TestSplitCommand(TestCase):

    def testForms(self):
        self.assertEqual(split_command("hello"), (None, "hello"))
        self.assertEqual(split_command("db:migrate"), ("db", "migrate"))
        self.assertEqual(split_command("db.migrate"), ("db", "migrate"))
        self.assertEqual(split_command("a.b:c"), ("a", "b:c"))


class TestDispatch(RunnerTestCase):

    def testHelloForms(self):
        self.assertEqual(invoke(self.runner, "hello World"), ["World"])
        self.assertEqual(invoke(self.runner, ["hello", "-n", "World", "--count", "2"]), ["World", "World"])
        self.assertEqual(invoke(self.runner, "hello --name=World 3"), ["World"] * 3)

    def testTokensAreKeptVerbatim(self):
        self.assertEqual(invoke(self.runner, ["hello", ""]), [""])
        self.assertEqual(invoke(self.runner, ["hello", " a "]), [" a "])
        self.assertEqual(invoke(self.runner, 'hello ""'), [""])
        self.assertEqual(invoke(self.runner, ["plugin:sync", "", "  x "]), ["", "  x "])

    def testAsyncTask(self):
        self.assertEqual(invoke(self.runner, "fetch example.org"), "EXAMPLE.ORG")

    def testRest(self):
        self.assertEqual(invoke(self.runner, "install a b c"), ["a", "b", "c"])
        self.assertEqual(invoke(self.runner, "install"), [])

    def testKeywordOnly(self):
        self.assertEqual(invoke(self.runner, "build web --dry-run"), ("web", True))
        self.assertEqual(invoke(self.runner, "build web -n"), ("web", True))
        self.assertEqual(invoke(self.runner, "build"), ("all", False))

    def testOptionalHaltsResolution(self):
        # no target: dry_run is never resolved
        self.assertEqual(invoke(self.runner, "build --dry-run"), ("all", False))

    def testJsonPayload(self):
        self.assertEqual(invoke(self.runner, ["search", '{"query": "x", "limit": 5}']), {"query": "x", "limit": 5})

    def testTypeMismatchHint(self):
        with self.assertRaises(TypeMismatchError) as context:
            invoke(self.runner, ["search", "[1, 2]"])
        self.assertEqual(context.exception.hint, "usage: tkn search <params>")
        self.assertEqual(context.exception.task, "search")
        self.assertEqual(context.exception.parameter, "params")

    def testMissingArgumentHint(self):
        with self.assertRaises(MissingArgumentError) as context:
            invoke(self.runner, "hello")
        self.assertEqual(context.exception.hint, "usage: tkn hello <name> [count]")

    def testFreshContext(self):
        self.assertIsInstance(invoke(self.runner, "context"), Context)

    def testNamespaceForms(self):
        self.assertEqual(invoke(self.runner, "db:migrate"), "migrate up")
        self.assertEqual(invoke(self.runner, "db.migrate down"), "migrate down")

    def testReflectedNamespace(self):
        self.assertEqual(invoke(self.runner, ["plugin:sync", "a", "--b=1"]), ["a", "--b=1"])

    def testInheritedRootMethod(self):
        self.assertEqual(invoke(self.runner, "inherited x"), "inherited")

    def testTaskFailure(self):
        with self.assertRaises(TaskFailedError) as context:
            invoke(self.runner, "fail")
        self.assertEqual(context.exception.message, "error running 'fail': boom")
        self.assertIsInstance(context.exception.error, RuntimeError)

    def testCustomGroup(self):
        self.assertEqual(invoke(Runner(self.path, group="DbNamespace"), "migrate sideways"), "migrate sideways")


class TestRouting(RunnerTestCase):

    def testPrivateAccess(self):
        for prompt in ("_private", "db:_helper", "_db:migrate", "_missing:task"):
            with self.subTest(prompt=prompt), self.assertRaises(PrivateAccessError):
                invoke(self.runner, prompt)

    def testUnknownTask(self):
        with self.assertRaises(UnknownTaskError) as context:
            invoke(self.runner, "helo")
        self.assertIn("did you mean 'hello'?", context.exception.hint)
        self.assertIn("db:migrate", context.exception.suggestions)

    def testUnknownNamespace(self):
        with self.assertRaises(UnknownNamespaceError) as context:
            invoke(self.runner, "dbs:migrate")
        self.assertIn("did you mean 'db'?", context.exception.hint)
        self.assertEqual(context.exception.suggestions, ("ghost", "db", "plugin"))

    def testUnknownNamespaceTask(self):
        with self.assertRaises(UnknownTaskError) as context:
            invoke(self.runner, "db:migrat")
        self.assertIn("available in db:", context.exception.hint)

    def testNamespaceWithoutAttribute(self):
        with self.assertRaises(NotCallableError):
            invoke(self.runner, "ghost:migrate")

    def testAttributesAreNotTasks(self):
        with self.assertRaises(UnknownTaskError):
            invoke(self.runner, "value")

    def testShellMode(self):
        stderr = io.StringIO()
        with redirect_stderr(stderr), self.assertRaises(SystemExit) as context:
            invoke(Runner(self.path, shell=True, colorful=False), "helo")
        self.assertEqual(context.exception.code, 1)
        self.assertIn("unknown task 'helo'", stderr.getvalue())


class TestViews(RunnerTestCase):

    def testTaskHelp(self):
        output = self.output("hello -h")
        self.assertIn("usage: tkn hello <name> [count]", output)
        self.assertIn("--name, -n", output)

    def testHelpWinsOverMissingArguments(self):
        self.assertIn("usage: tkn search <params>", self.output(["search", "--help"]))

    def testOverview(self):
        for prompt in ("", "-h", "--help"):
            with self.subTest(prompt=prompt):
                output = self.output(prompt)
                self.assertIn("Fixture tasks", output)
                self.assertIn("hello <name> [count]", output)
                self.assertIn("db:migrate [direction]", output)

    def testListing(self):
        output = self.output("--list")
        self.assertIn("available tasks:", output)
        self.assertIn("plugin:sync", output)
        self.assertNotIn("Fixture tasks", output)

    def testVersion(self):
        self.assertTrue(self.output("--version").strip())


class TestLoading(RunnerTestCase):

    def testMissingFile(self):
        stdout = io.StringIO()
        with redirect_stdout(stdout), self.assertRaises(TasksNotFoundError):
            invoke(Runner(Path(self.directory.name) / "missing.py"), "hello")
        self.assertIn("No missing.py found", stdout.getvalue())
        self.assertIn("class Tasks:", stdout.getvalue())

    def testSyntaxError(self):
        path = self.write("broken.py", "class Tasks(:\n")
        with self.assertRaises(TasksUnloadableError) as context:
            invoke(path, "hello")
        self.assertIsInstance(context.exception.error, SyntaxError)

    def testMissingGroup(self):
        path = self.write("empty.py", "VALUE = 1\n")
        with self.assertRaises(TasksUnloadableError):
            invoke(path, "hello")
        with self.assertRaises(TasksUnloadableError):
            invoke(Runner(self.path, group="Missing"), "hello")

    def testInvalidGroup(self):
        with self.assertRaises(ValueError):
            Runner(self.path, group="_Tasks")

    def testInvokeWithPath(self):
        self.assertEqual(invoke(str(self.path), "hello World"), ["World"])

    def testInvokeTypeErrors(self):
        with self.assertRaises(TypeError):
            invoke(42)
        with self.assertRaises(TypeError):
            invoke(self.runner, 42)
        with self.assertRaises(TypeError):
            invoke(self.runner, ["hello", 1])


if __name__ == "__main__":
    unittest.main()
