"""
Tokenizer: classify raw argument strings, and split command-line text.

Classification (tokenize)
- "--name" / "--name=value"  -> LONG
- "-x" / "-x=value"          -> SHORT (exactly one letter after the dash)
- anything else              -> VALUE ("-5", "-abc", "path", "")

An option splits at its first '=' unless a '"' appears before it; everything
after that '=' is kept verbatim as the inline value (further '=' and quotes
included). Arguments are never re-split: a value joined by the shell stays a
single VALUE token.

Splitting (split)
- POSIX shlex rules with whitespace splitting: double quotes group, and inside
  them only \\" and \\\\ are escapes. With comments=True a '#' starts a comment
  that runs to the end of the line.
"""
import enum
import re
import shlex
from typing import NamedTuple


class TokenKind(enum.Enum):
    LONG = "long"
    SHORT = "short"
    VALUE = "value"


class Token(NamedTuple):
    """
    One classified argument.

    - kind: TokenKind member.
    - text: the raw argument as received.
    - name: option name ("--tags", "-t") or None for values.
    - value: the inline value of an option (None when absent) or the text of a value.
    - position: zero-based index of the argument in the input.
    """
    kind: TokenKind
    text: str
    name: str | None
    value: str | None
    position: int

    @property
    def option(self):
        return self.kind is not TokenKind.VALUE


def _split_inline(text):
    equal = text.find("=")
    quote = text.find('"')
    if equal != -1 and (quote == -1 or equal < quote):
        return text[:equal], text[equal + 1:]
    return text, None


def tokenize(arguments, /):
    """
    Classify every argument string; returns a tuple of Token.

    Raises TypeError when an argument is not a string.
    """
    tokens = []
    for position, text in enumerate(arguments):
        if not isinstance(text, str):
            raise TypeError(f"tokenize() arguments must be strings (got {type(text).__name__} at {position})")
        if text.startswith("--"):
            name, value = _split_inline(text)
            tokens.append(Token(TokenKind.LONG, text, name, value, position))
        elif re.fullmatch(r"-[^\W\d_](=.*)?", text, re.DOTALL):
            name, value = _split_inline(text)
            tokens.append(Token(TokenKind.SHORT, text, name, value, position))
        else:
            tokens.append(Token(TokenKind.VALUE, text, None, text, position))
    return tuple(tokens)


def split(command_line, /, *, comments=False):
    """
    Split a command-line string into arguments.

    >>> split('--name "hello world" -v')
    ['--name', 'hello world', '-v']
    >>> split('--level 3 # trailing note', comments=True)
    ['--level', '3']
    """
    if not isinstance(command_line, str):
        raise TypeError("split() argument must be a string")
    lexer = shlex.shlex(command_line, posix=True)
    lexer.whitespace_split = True
    lexer.commenters = "#" if comments else ""
    return list(lexer)


__all__ = (
    # Classes
    "Token",
    "TokenKind",

    # Functions
    "tokenize",
    "split",
)
