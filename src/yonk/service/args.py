"""Shell-style word expansion for daemon arguments.

Follows wordexp(3) with command substitution disabled:
- single quotes, double quotes and backslash escapes are honored
- $NAME and ${NAME} are substituted from the environment (unset expands
  to nothing) and unquoted substitutions are split on whitespace
- command substitution and unquoted shell metacharacters are rejected
- globbing is never performed
"""

import os
import re
from collections.abc import Iterable, Mapping

IFS = " \t\n"
BAD_CHARS = "|&;<>(){}"
# Characters a backslash escapes inside double quotes
DQUOTE_ESCAPES = '$`"\\\n'

_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_SPECIAL = re.compile(r"[0-9#?*@$!-]")


class ArgumentExpansionError(ValueError):
    """Raised when an argument string cannot be expanded safely."""


class _Words:
    """Accumulates expanded words, tracking whether the current one exists."""

    def __init__(self) -> None:
        self.words: list[str] = []
        self._current: list[str] = []
        self._started = False

    def add(self, text: str) -> None:
        self._current.append(text)
        self._started = True

    def mark(self) -> None:
        # Quotes produce a word even when empty
        self._started = True

    def end(self) -> None:
        if self._started:
            self.words.append("".join(self._current))
        self._current = []
        self._started = False

    def add_split(self, value: str) -> None:
        """Add an unquoted expansion, splitting it into fields."""
        if not value:
            return
        if value[0] in IFS:
            self.end()
        fields = value.split()
        for i, field in enumerate(fields):
            if i:
                self.end()
            self.add(field)
        if value[-1] in IFS:
            self.end()


def _expand_var(text: str, pos: int, env: Mapping[str, str]) -> tuple[str, int]:
    """Expand the parameter starting after the '$' at text[pos - 1].

    Returns:
        Tuple of (value, position after the expansion). A '$' that does
        not start an expansion is returned literally.
    """
    if pos >= len(text):
        return "$", pos

    ch = text[pos]
    if ch == "(":
        raise ArgumentExpansionError("command substitution is not allowed")
    if ch == "{":
        end = text.find("}", pos + 1)
        if end == -1:
            raise ArgumentExpansionError("unterminated ${...} expansion")
        name = text[pos + 1 : end]
        if not _NAME.fullmatch(name):
            raise ArgumentExpansionError(f"bad substitution: ${{{name}}}")
        return env.get(name, ""), end + 1

    match = _NAME.match(text, pos)
    if match:
        return env.get(match.group(0), ""), match.end()

    if _SPECIAL.match(ch):
        # Positional and special parameters are always empty here
        return "", pos + 1

    return "$", pos


def expand_args(text: str, env: Mapping[str, str] | None = None) -> list[str]:
    """Split and expand an argument string into words.

    Args:
        text: Shell-style argument string.
        env: Variables for substitution. Defaults to os.environ.

    Returns:
        List of expanded words.

    Raises:
        ArgumentExpansionError: On command substitution, unquoted shell
            metacharacters, or unterminated quoting.
    """
    if env is None:
        env = os.environ

    words = _Words()
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]

        if ch in IFS:
            words.end()
            i += 1
        elif ch == "\\":
            if i + 1 >= n:
                raise ArgumentExpansionError("trailing backslash")
            if text[i + 1] != "\n":  # Escaped newline is a line continuation
                words.add(text[i + 1])
            i += 2
        elif ch == "'":
            end = text.find("'", i + 1)
            if end == -1:
                raise ArgumentExpansionError("unterminated single quote")
            words.mark()
            words.add(text[i + 1 : end])
            i = end + 1
        elif ch == '"':
            words.mark()
            i = _expand_double_quoted(text, i + 1, env, words)
        elif ch == "`":
            raise ArgumentExpansionError("command substitution is not allowed")
        elif ch == "$":
            value, i = _expand_var(text, i + 1, env)
            if value == "$":
                words.add(value)
            else:
                words.add_split(value)
        elif ch in BAD_CHARS:
            raise ArgumentExpansionError(f"illegal unquoted character: {ch!r}")
        else:
            words.add(ch)
            i += 1

    words.end()
    return words.words


def _expand_double_quoted(
    text: str, pos: int, env: Mapping[str, str], words: _Words
) -> int:
    """Expand a double-quoted section starting at pos.

    Returns:
        Position after the closing quote.
    """
    n = len(text)
    while pos < n:
        ch = text[pos]
        if ch == '"':
            return pos + 1
        if ch == "\\" and pos + 1 < n and text[pos + 1] in DQUOTE_ESCAPES:
            if text[pos + 1] != "\n":
                words.add(text[pos + 1])
            pos += 2
        elif ch == "`":
            raise ArgumentExpansionError("command substitution is not allowed")
        elif ch == "$":
            value, pos = _expand_var(text, pos + 1, env)
            words.add(value)
        else:
            words.add(ch)
            pos += 1
    raise ArgumentExpansionError("unterminated double quote")


def build_argv(
    daemon: str, extra_args: Iterable[str], env: Mapping[str, str] | None = None
) -> list[str]:
    """Build the daemon argument vector.

    Args:
        daemon: Daemon path, used as argument 0.
        extra_args: Raw argument strings, each word-expanded.
        env: Variables for substitution. Defaults to os.environ.

    Returns:
        The full argument vector.
    """
    argv = [daemon]
    for raw in extra_args:
        argv.extend(expand_args(raw, env))
    return argv
