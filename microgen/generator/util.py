"""Identifier helpers shared by the generator."""

import re

_NON_IDENT = re.compile(r"[^A-Za-z0-9_]")


def to_camel_case(s: str) -> str:
    """Convert a schema identifier to an exported Go identifier.

    Follows protoc-gen-go: an underscore followed by a lower-case letter is
    dropped and the letter capitalized, a leading underscore becomes "X",
    digits and other underscores are kept as they are.
    """
    if not s:
        return ""

    out: list[str] = []
    i = 0
    if s[0] == "_":
        out.append("X")
        i += 1

    while i < len(s):
        c = s[i]
        if c == "_" and i + 1 < len(s) and s[i + 1].islower() and s[i + 1].isascii():
            i += 1
            continue
        if c.isdigit():
            out.append(c)
            i += 1
            continue
        if c.isascii() and c.islower():
            c = c.upper()
        out.append(c)
        i += 1
        while i < len(s) and s[i].isascii() and s[i].islower():
            out.append(s[i])
            i += 1

    return "".join(out)


def to_camel_case_dotted(name: str) -> str:
    """Camel-case a dotted nested name, joining the parts with underscores."""
    return to_camel_case("_".join(name.split(".")))


def unexport(s: str) -> str:
    """Lower-case only the first character of an identifier."""
    return s[:1].lower() + s[1:]


def sanitize_identifier(s: str) -> str:
    """Turn an arbitrary string into something usable as a Go package name."""
    ident = _NON_IDENT.sub("_", s)
    if not ident or ident[0].isdigit():
        ident = "_" + ident
    return ident
