"""Argument escaping for raw FTP command lines.

Raw command lines are built with Windows-shell style quoting on every
platform so command lines stay byte-for-byte compatible with the ones
existing servers and scripts already receive.
"""

import re
from typing import Iterable, Optional, Union

# Characters that force an argument to be quoted
SPECIAL_CHARS = re.compile(r'[/()%!^"<>&|\s]', re.ASCII)

TRAILING_BACKSLASHES = re.compile(r"(\\+)$")

ESCAPES = str.maketrans({
    '"': '""',
    "^": '"^^"',
    "%": '"^%"',
    "!": '"^!"',
    "\n": "!LF!",
})

# Escaped sequences, longest first, for unescaping
UNESCAPES = [
    ("!LF!", "\n"),
    ('"^^"', "^"),
    ('"^%"', "%"),
    ('"^!"', "!"),
    ('""', '"'),
]


def escape_argument(argument: Optional[Union[str, int, float]]) -> str:
    """
    Escape one argument of a raw command line.

    Args:
        argument: Argument value; numbers are converted to text

    Returns:
        The argument, quoted when it contains special characters
    """
    if argument is None or argument == "":
        return '""'
    argument = str(argument)

    if "\0" in argument:
        argument = argument.replace("\0", "?")

    if not SPECIAL_CHARS.search(argument):
        return argument

    # Keep a trailing backslash from escaping the closing quote
    argument = TRAILING_BACKSLASHES.sub(r"\1\1", argument)

    return '"' + argument.translate(ESCAPES) + '"'


def join_command_line(argv: Iterable[Optional[Union[str, int, float]]]) -> str:
    """Escape every argument and join them with single spaces."""
    return " ".join(escape_argument(argument) for argument in argv)


def unescape_argument(token: str) -> str:
    """
    Reverse ``escape_argument`` for a single token.

    NUL bytes replaced during escaping cannot be recovered.

    Raises:
        ValueError: If the token is not a valid escaped argument
    """
    if not token.startswith('"'):
        return token
    if len(token) < 2 or not token.endswith('"'):
        raise ValueError(f"Unterminated quoted argument: {token!r}")

    body = token[1:-1]
    chars = []
    i = 0
    while i < len(body):
        for escaped, plain in UNESCAPES:
            if body.startswith(escaped, i):
                chars.append(plain)
                i += len(escaped)
                break
        else:
            if body[i] in '"!':
                raise ValueError(f"Invalid escape sequence at offset {i} in {token!r}")
            chars.append(body[i])
            i += 1

    result = "".join(chars)
    match = TRAILING_BACKSLASHES.search(result)
    if match:
        # "$" also matches before a final newline, as during escaping
        run = len(match.group(1))
        result = result[:match.start()] + "\\" * (run // 2) + result[match.end():]
    return result
