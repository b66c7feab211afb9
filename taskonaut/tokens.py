"""
CLI tokenizer: argv (after the task name) -> positionals + flag map.

Grammar, checked per token in this order
1. "--"                 stop flag parsing; every later token is positional verbatim.
2. "--name=value"       flags[name] = value (split at the first "="; value may be "").
3. "--no-name"          flags[name] = False.
4. "--name"             flags[name] = next token when it exists and is not flag-shaped
                        (does not start with "-"), which is then consumed; else True.
5. "-x=value"           flags[x] = value (x is the single character after the dash).
6. "-x"                 same next-token rule as 4.
7. anything else        positional.

Repeated keys: the last write wins.
"""
from collections import deque, namedtuple

ParsedArgv = namedtuple("ParsedArgv", ("positional", "flags"))
ParsedArgv.__doc__ = """
Tokenizer result.

- positional: list[str], raw tokens in encounter order.
- flags: dict[str, str | bool], keyed without leading dashes.
"""

HELP_TOKENS = ("-h", "--help")


def _flagged(token):
    return token.startswith("-")


def tokenize(argv, /):
    """
    Split argv into a ParsedArgv.

    Parameters
    - argv: iterable of str, help tokens already filtered out.

    Returns
    - ParsedArgv(positional, flags)
    """
    tokens = deque(argv)
    positional = []
    flags = {}

    while tokens:
        token = tokens.popleft()

        if token == "--":
            positional.extend(tokens)
            break

        if token.startswith("--") and "=" in token:
            name, _, value = token[2:].partition("=")
            flags[name] = value
        elif token.startswith("--no-"):
            flags[token[5:]] = False
        elif token.startswith("--"):
            flags[token[2:]] = tokens.popleft() if tokens and not _flagged(tokens[0]) else True
        elif token.startswith("-") and len(token) > 2 and "=" in token:
            flags[token[1]] = token.partition("=")[2]
        elif token.startswith("-") and len(token) == 2:
            flags[token[1]] = tokens.popleft() if tokens and not _flagged(tokens[0]) else True
        else:
            positional.append(token)

    return ParsedArgv(positional, flags)


def strip_help(argv, /):
    """
    Return (wants_help, argv without help tokens).
    """
    argv = list(argv)
    return any(token in HELP_TOKENS for token in argv), [token for token in argv if token not in HELP_TOKENS]


__all__ = (
    "ParsedArgv",
    "HELP_TOKENS",
    "tokenize",
    "strip_help",
)
