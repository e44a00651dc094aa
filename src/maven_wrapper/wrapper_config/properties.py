"""
Reading and writing of Java-style .properties files.

Supports the subset of the format found in wrapper properties files:
"key=value", "key: value" and "key value" entries, "#" and "!" comments,
backslash line continuations and the standard escapes, including \\uXXXX.
"""

import os
import pathlib
from datetime import datetime
from typing import Dict, Iterable, Iterator, Mapping, Optional, Union

from maven_wrapper.wrapper_exceptions import ConfigurationException


_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_KEY_TERMINATORS = "=: \t\f"
_WHITESPACE = " \t\f"


def loads(text: str) -> Dict[str, str]:
    """
    Parse the text of a properties file.

    Returns:
        Mapping of keys to values, later duplicates overriding earlier ones
    """
    properties: Dict[str, str] = {}
    for logical_line in _logical_lines(text.splitlines()):
        key, value = _split_entry(logical_line)
        properties[_unescape(key)] = _unescape(value)
    return properties


def load(path: Union[str, pathlib.Path]) -> Dict[str, str]:
    with open(path, "r", encoding="utf-8") as f:
        return loads(f.read())


def dumps(properties: Mapping[str, str], comments: Optional[str] = None) -> str:
    """
    Render properties in a form load() reads back unchanged.
    """
    lines = []
    if comments:
        lines.extend(f"#{line}" for line in comments.splitlines())
    lines.append(f"#{datetime.now().strftime('%a %b %d %H:%M:%S %Y')}")
    for key, value in properties.items():
        lines.append(f"{_escape(key, is_key=True)}={_escape(value, is_key=False)}")
    return "\n".join(lines) + "\n"


def dump(
    properties: Mapping[str, str],
    path: Union[str, pathlib.Path],
    comments: Optional[str] = None,
) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(dumps(properties, comments))


class SystemPropertiesHandler:
    """
    Loads the system properties passed to Maven from a properties file.
    """

    @staticmethod
    def get_system_properties(properties_file: Union[str, pathlib.Path]) -> Dict[str, str]:
        """
        Returns the properties in the file, or an empty dictionary if the file
        does not exist, is not a regular file or is not readable.

        Raises:
            ConfigurationException: If the file is readable but cannot be loaded
        """
        properties_file = pathlib.Path(properties_file)
        if not properties_file.is_file() or not os.access(properties_file, os.R_OK):
            return {}
        try:
            return load(properties_file)
        except (OSError, ValueError) as e:
            raise ConfigurationException(f"Error when loading properties file '{properties_file}'.") from e


def _logical_lines(lines: Iterable[str]) -> Iterator[str]:
    pending: Optional[str] = None

    for raw in lines:
        line = raw.lstrip(_WHITESPACE)

        if pending is None:
            if not line or line[0] in "#!":
                continue
            current = line
        else:
            current = pending + line

        if _ends_with_continuation(current):
            pending = current[:-1]
            continue

        pending = None
        yield current

    if pending is not None:
        yield pending


def _ends_with_continuation(line: str) -> bool:
    backslashes = len(line) - len(line.rstrip("\\"))
    return backslashes % 2 == 1


def _split_entry(line: str):
    index = 0
    length = len(line)

    while index < length:
        ch = line[index]
        if ch == "\\":
            index += 2
            continue
        if ch in _KEY_TERMINATORS:
            break
        index += 1

    key = line[:index]
    rest = line[index:].lstrip(_WHITESPACE)
    if rest and rest[0] in "=:":
        rest = rest[1:].lstrip(_WHITESPACE)
    return key, rest


def _unescape(text: str) -> str:
    out = []
    index = 0
    length = len(text)

    while index < length:
        ch = text[index]
        if ch != "\\" or index + 1 >= length:
            out.append(ch)
            index += 1
            continue

        nxt = text[index + 1]
        if nxt == "u":
            code = text[index + 2:index + 6]
            if len(code) != 4:
                raise ValueError(f"Malformed \\uxxxx encoding in '{text}'")
            out.append(chr(int(code, 16)))
            index += 6
            continue

        out.append(_ESCAPES.get(nxt, nxt))
        index += 2

    return "".join(out)


def _escape(text: str, is_key: bool) -> str:
    out = []
    for position, ch in enumerate(text):
        if ch == " " and (is_key or position == 0):
            out.append("\\ ")
        elif ch == "\\":
            out.append("\\\\")
        elif ch == "\t":
            out.append("\\t")
        elif ch == "\n":
            out.append("\\n")
        elif ch == "\r":
            out.append("\\r")
        elif ch == "\f":
            out.append("\\f")
        elif ch in "=:#!":
            out.append("\\" + ch)
        elif ord(ch) < 0x20:
            out.append("\\u%04X" % ord(ch))
        else:
            out.append(ch)
    return "".join(out)
