"""
Signature scanner and namespace detector.

Discovery works on the text of the task file; nothing is imported or executed
here. The text is lexed with the standard tokenizer so group bodies are bounded
by real INDENT/DEDENT pairs and never confused by strings or comments that look
like declarations.

Task group
- header: "class <Name>" with optional bases, then ":".
- body: the indented block that follows.

Eligible operation (top level of a group body)
- "def name(...)" or "async def name(...)".
- its first statement is a docstring (no docstring: invisible, by rule).
- its first parameter after the receiver is annotated Context (bare, dotted or
  quoted); a def whose very first parameter is the Context is accepted too.
- name not privacy-marked ("_...") and not the constructor.

Namespaces
- "prop = Group()", "prop: Group = Group()" or "self.prop = Group()" anywhere in
  the file. Privacy-marked props are skipped; groups yielding no task are
  ignored; the last assignment of a prop wins.
"""
import ast
import io
import logging
import re
import tokenize

from . import directives, params
from .descriptors import *

logger = logging.getLogger(__name__)

ROOT = "Tasks"
CONSTRUCTOR = "__init__"

_CONTEXT = re.compile(r"""(?P<quote>["']?)(?:\w+\.)*Context(?P=quote)""")
_NAMESPACE = re.compile(
    r"(?:\bself\.)?\b(?P<prop>\w+)(?:[ \t]*:[ \t]*[^=\n]*?)?[ \t]*=[ \t]*(?P<group>\w+)[ \t]*\([ \t]*\)"
)
_TRIVIA = (tokenize.NL, tokenize.COMMENT)
_BOUNDARIES = (tokenize.NEWLINE, tokenize.INDENT, tokenize.DEDENT)


def _public(name):
    return not name.startswith("_") and name != CONSTRUCTOR


class Scanner:
    """
    Token view over one source text, shared by every group lookup of a pass.
    """

    def __init__(self, source):
        self.source = source
        self.tokens = []
        try:
            for token in tokenize.generate_tokens(io.StringIO(source).readline):
                self.tokens.append(token)
        except (tokenize.TokenError, SyntaxError) as error:
            logger.debug("tokenizing stopped early: %s", error)

        self._offsets = [0]
        for line in source.splitlines(keepends=True):
            self._offsets.append(self._offsets[-1] + len(line))

    def _offset(self, position):
        row, column = position
        return self._offsets[row - 1] + column

    def _significant(self, index, step):
        """
        Index of the nearest non-trivia token from index (exclusive) in direction step.
        """
        index += step
        while 0 <= index < len(self.tokens) and self.tokens[index].type in _TRIVIA:
            index += step
        return index

    def _statement(self, index):
        before = self._significant(index, -1)
        return before < 0 or self.tokens[before].type in _BOUNDARIES

    def _is(self, index, type, string=None):
        if not 0 <= index < len(self.tokens):
            return False
        token = self.tokens[index]
        return token.type == type and (string is None or token.string == string)

    def _closing(self, index, closer):
        """
        From an opening token, index of the token closing it (or of `closer` at depth 0).
        """
        depth = 0
        for index in range(index, len(self.tokens)):
            token = self.tokens[index]
            if token.type != tokenize.OP:
                continue
            if token.string in ("(", "[", "{"):
                depth += 1
            elif token.string in (")", "]", "}"):
                depth -= 1
                if not depth and closer == ")":
                    return index
            elif token.string == closer and not depth:
                return index
        return -1

    def _block(self, colon):
        """
        Token range (start, end) of the indented block opened by the ":" at colon.

        A one-line suite yields an empty range at its first token. Comments
        trailing the header line are skipped.
        """
        index = self._significant(colon, +1)
        if not self._is(index, tokenize.NEWLINE):
            return index, index
        index = self._significant(index, +1)
        if not self._is(index, tokenize.INDENT):
            return index, index
        start = index + 1
        level = 1
        for end in range(start, len(self.tokens)):
            if self.tokens[end].type == tokenize.INDENT:
                level += 1
            elif self.tokens[end].type == tokenize.DEDENT:
                level -= 1
                if not level:
                    return start, end
        return start, len(self.tokens)

    def _docstring(self, index):
        """
        Docstring text when the statement at index is a lone string literal, else None.
        """
        strings = []
        while self._is(index, tokenize.STRING):
            strings.append(self.tokens[index].string)
            index += 1
        while self._is(index, tokenize.COMMENT):
            index += 1
        if not strings or not (self._is(index, tokenize.NEWLINE) or self._is(index, tokenize.ENDMARKER)):
            return None
        try:
            value = ast.literal_eval(" ".join(strings))
        except (ValueError, SyntaxError):
            return None
        return value if isinstance(value, str) else None

    def _suite_docstring(self, colon):
        """
        Docstring of the suite opened at colon, inline ("def f(): 'doc'") or indented.
        """
        if self._is(first := self._significant(colon, +1), tokenize.STRING):
            return self._docstring(first)
        start, _ = self._block(colon)
        return self._docstring(start)

    def locate(self, name):
        """
        Find the group header "class <name> ...:" and return its body range, or None.
        """
        for index, token in enumerate(self.tokens):
            if (
                token.type == tokenize.NAME and token.string == "class" and
                self._is(index + 1, tokenize.NAME, name) and
                self._statement(index)
            ):
                break
        else:
            return None

        if (colon := self._closing(index + 2, ":")) < 0:
            return None
        return colon, *self._block(colon)

    def functions(self, start, end):
        """
        Yield (name, parameter text, docstring | None) for top-level defs in a body range.
        """
        level = 0
        for index in range(start, end):
            token = self.tokens[index]
            if token.type == tokenize.INDENT:
                level += 1
            elif token.type == tokenize.DEDENT:
                level -= 1
            elif level or token.type != tokenize.NAME or not self._statement(index):
                continue
            elif token.string == "def" or (token.string == "async" and self._is(index + 1, tokenize.NAME, "def")):
                keyword = index + (token.string == "async")
                if not self._is(keyword + 1, tokenize.NAME) or not self._is(keyword + 2, tokenize.OP, "("):
                    continue
                if (closing := self._closing(keyword + 2, ")")) < 0:
                    continue
                if (colon := self._closing(closing + 1, ":")) < 0:
                    continue
                text = self.source[self._offset(self.tokens[keyword + 2].end):self._offset(self.tokens[closing].start)]
                yield self.tokens[keyword + 1].string, text, self._suite_docstring(colon)

    def group(self, name):
        """
        Ordered mapping of task name -> TaskDescriptor for the group, {} when absent.
        """
        methods = {}
        if (located := self.locate(name)) is None:
            logger.debug("task group %r not found in source", name)
            return methods

        _, start, end = located
        for method, text, docstring in self.functions(start, end):
            if docstring is None or not _public(method):
                continue
            if (remaining := _after_context(text)) is None:
                continue
            methods[method] = TaskDescriptor(
                directives.description(docstring),
                params.classify(remaining, docstring),
            )

        logger.debug("task group %r: %d task(s) discovered", name, len(methods))
        return methods

    def header_doc(self, name):
        """
        First usable line of the group's docstring, or None.
        """
        if (located := self.locate(name)) is None:
            return None
        colon, _, _ = located
        return directives.description(self._suite_docstring(colon)) or None

    def namespaces(self):
        """
        Mapping of namespace prop -> task mapping, scanned over the whole text.
        """
        found = {}
        for match in _NAMESPACE.finditer(self.source):
            prop, group = match["prop"], match["group"]
            if prop.startswith("_"):
                continue
            if methods := self.group(group):
                logger.debug("namespace %r bound to group %r", prop, group)
                found[prop] = methods
        return found


def _context(text):
    stars, _, annotation, _ = params.entry(text)
    return not stars and annotation is not None and _CONTEXT.fullmatch(annotation) is not None


def _after_context(text):
    """
    Parameter text following the execution context, or None when the def is not a task.
    """
    entries = params.split(text)
    if entries and _context(entries[0]):
        return ", ".join(entries[1:])
    if len(entries) >= 2 and _context(entries[1]):
        stars, _, annotation, _ = params.entry(entries[0])
        if not stars and annotation is None:
            return ", ".join(entries[2:])
    return None


def scan_group(source, name, /):
    """
    Ordered mapping of task name -> TaskDescriptor for one group of the source.
    """
    return Scanner(source).group(name)


def detect_namespaces(source, /):
    """
    Mapping of namespace prop -> (task name -> TaskDescriptor) for the whole source.
    """
    return Scanner(source).namespaces()


def discover(source, /, root=ROOT):
    """
    Build a TaskRegistry from source text: root group, namespaces, header doc.
    """
    scanner = Scanner(source)
    return TaskRegistry(scanner.group(root), scanner.namespaces(), scanner.header_doc(root))


__all__ = (
    "ROOT",
    "Scanner",
    "scan_group",
    "detect_namespaces",
    "discover",
)
