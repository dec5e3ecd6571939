"""Non-evaluating reader for Leiningen ``project.clj`` manifests.

A ``project.clj`` is Clojure code. Most are a single literal ``defproject``
form, but some compute their version or dependencies, read files, or define
helpers at the top level. This reader handles the literal subset and refuses
everything else with ``ManifestParseError``; it never evaluates anything.

Accepted syntax: strings, regex literals, characters, numbers, ``nil``,
booleans, symbols, keywords, lists, vectors, maps, sets, ``;`` comments,
``#_`` discard, ``^`` metadata (dropped), ``'`` quote and tagged literals.
Refused: ``~``, ``~@``, ``@``, syntax quote, ``#=``, ``#(`` and ``#'``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from voom.core.manifest.models import Dependency, Manifest
from voom.core.tags.models import ProjectCoordinate
from voom.exceptions import ManifestParseError


@dataclass(frozen=True)
class Symbol:
    name: str


@dataclass(frozen=True)
class Keyword:
    name: str


@dataclass(frozen=True)
class Seq:
    """A bracketed form: ``list`` ``()``, ``vector`` ``[]``, ``map`` ``{}``
    or ``set`` ``#{}``."""

    kind: str
    items: tuple[Any, ...]


_CLOSERS = {"(": ")", "[": "]", "{": "}"}
_KINDS = {"(": "list", "[": "vector", "{": "map"}
_DELIMITERS = set('()[]{}";,') | set(" \t\r\n\f")
_INT_RE = re.compile(r"^[+-]?\d+N?$")
_FLOAT_RE = re.compile(r"^[+-]?\d+(\.\d*)?([eE][+-]?\d+)?M?$")
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", '"': '"', "\\": "\\"}
_EVALUATING = {
    "~": "unquote",
    "@": "deref",
    "`": "syntax quote",
    "#=": "read-time eval",
    "#(": "anonymous function",
    "#'": "var quote",
}
_DISCARD = object()


class _Reader:
    def __init__(self, text: str, path: str) -> None:
        self.text = text
        self.path = path
        self.pos = 0

    def fail(self, message: str) -> ManifestParseError:
        line = self.text.count("\n", 0, self.pos) + 1
        return ManifestParseError(
            f"{message} (line {line})", path=self.path, line=line,
        )

    def skip_blank(self) -> None:
        text = self.text
        while self.pos < len(text):
            ch = text[self.pos]
            if ch in " \t\r\n\f,":
                self.pos += 1
            elif ch == ";":
                end = text.find("\n", self.pos)
                self.pos = len(text) if end < 0 else end + 1
            else:
                return

    def read_all(self) -> list[Any]:
        forms = []
        while True:
            self.skip_blank()
            if self.pos >= len(self.text):
                return forms
            form = self.read_form()
            if form is not _DISCARD:
                forms.append(form)

    def read_form(self) -> Any:
        self.skip_blank()
        if self.pos >= len(self.text):
            raise self.fail("Unexpected end of manifest")
        text = self.text
        ch = text[self.pos]
        two = text[self.pos:self.pos + 2]

        if two in _EVALUATING or ch in _EVALUATING:
            what = _EVALUATING.get(two) or _EVALUATING[ch]
            raise self.fail(f"Manifest uses an evaluating form ({what})")
        if ch in _CLOSERS:
            self.pos += 1
            return Seq(_KINDS[ch], self.read_until(_CLOSERS[ch]))
        if ch in ")]}":
            raise self.fail(f"Unbalanced {ch!r}")
        if ch == '"':
            self.pos += 1
            return self.read_string()
        if ch == "'":
            self.pos += 1
            return self.read_required()
        if ch == "^":
            self.pos += 1
            self.read_required()
            return self.read_required()
        if ch == "\\":
            return self.read_char()
        if ch == "#":
            return self.read_dispatch()
        return self.read_atom()

    def read_required(self) -> Any:
        while True:
            form = self.read_form()
            if form is not _DISCARD:
                return form

    def read_until(self, closer: str) -> tuple[Any, ...]:
        items = []
        while True:
            self.skip_blank()
            if self.pos >= len(self.text):
                raise self.fail(f"Missing {closer!r}")
            if self.text[self.pos] == closer:
                self.pos += 1
                return tuple(items)
            form = self.read_form()
            if form is not _DISCARD:
                items.append(form)

    def read_string(self, raw: bool = False) -> str:
        out = []
        text = self.text
        while self.pos < len(text):
            ch = text[self.pos]
            self.pos += 1
            if ch == '"':
                return "".join(out)
            if ch == "\\" and self.pos < len(text):
                nxt = text[self.pos]
                self.pos += 1
                if raw:
                    out.append(ch + nxt if nxt != '"' else nxt)
                else:
                    out.append(_ESCAPES.get(nxt, nxt))
            else:
                out.append(ch)
        raise self.fail("Unterminated string")

    def read_char(self) -> str:
        start = self.pos
        self.pos += 2
        while self.pos < len(self.text) and self.text[self.pos] not in _DELIMITERS:
            self.pos += 1
        return self.text[start + 1:self.pos]

    def read_dispatch(self) -> Any:
        text = self.text
        nxt = text[self.pos + 1:self.pos + 2]
        if nxt == "{":
            self.pos += 2
            return Seq("set", self.read_until("}"))
        if nxt == '"':
            self.pos += 2
            return self.read_string(raw=True)
        if nxt == "_":
            self.pos += 2
            self.read_required()
            return _DISCARD
        if nxt and nxt not in _DELIMITERS:
            # Tagged literal such as #inst "...": keep the value.
            self.pos += 1
            self.read_atom()
            return self.read_required()
        raise self.fail("Unsupported dispatch form")

    def read_atom(self) -> Any:
        start = self.pos
        while self.pos < len(self.text) and self.text[self.pos] not in _DELIMITERS:
            self.pos += 1
        token = self.text[start:self.pos]
        if not token:
            raise self.fail(f"Unexpected character {self.text[start]!r}")
        if token.startswith(":"):
            return Keyword(token.lstrip(":"))
        if token == "nil":
            return None
        if token in ("true", "false"):
            return token == "true"
        if _INT_RE.match(token):
            return int(token.rstrip("N"))
        if _FLOAT_RE.match(token):
            return float(token.rstrip("M"))
        return Symbol(token)


def read_forms(text: str, path: str = "") -> list[Any]:
    """Read every top-level form of ``text``.

    Raises:
        ManifestParseError: On syntax errors or evaluating forms.
    """
    return _Reader(text, path).read_all()


class CljManifestReader:
    """``ManifestReader`` for Leiningen ``project.clj`` files."""

    def read(self, text: str, path: str = "") -> Manifest:
        forms = read_forms(text, path)
        projects = [f for f in forms if _is_defproject(f)]
        if len(projects) != 1:
            raise ManifestParseError(
                f"Expected one defproject form, found {len(projects)}",
                path=path, forms=len(forms),
            )
        if len(forms) != 1:
            raise ManifestParseError(
                "Manifest has top-level forms besides defproject", path=path,
                forms=len(forms),
            )

        items = projects[0].items
        if len(items) < 3 or not isinstance(items[1], Symbol):
            raise ManifestParseError("defproject needs a name and a version", path=path)
        coordinate = _coordinate(items[1], path)
        version = items[2]
        if not isinstance(version, str):
            raise ManifestParseError(
                f"Version of {coordinate} is not a literal string", path=path,
            )

        options = items[3:]
        if len(options) % 2:
            raise ManifestParseError(
                f"defproject {coordinate} has an odd number of options", path=path,
            )
        settings = dict(zip(options[::2], options[1::2]))
        dependencies = _dependencies(settings.get(Keyword("dependencies")), path)
        return Manifest(
            coordinate=coordinate,
            version=version,
            dependencies=dependencies,
            path=_manifest_dir(path),
        )


def _is_defproject(form: Any) -> bool:
    return (
        isinstance(form, Seq)
        and form.kind == "list"
        and bool(form.items)
        and form.items[0] == Symbol("defproject")
    )


def _coordinate(symbol: Symbol, path: str) -> ProjectCoordinate:
    try:
        return ProjectCoordinate.parse(symbol.name)
    except ValueError as exc:
        raise ManifestParseError(str(exc), path=path) from exc


def _dependencies(value: Any, path: str) -> tuple[Dependency, ...]:
    if value is None:
        return ()
    if not isinstance(value, Seq) or value.kind != "vector":
        raise ManifestParseError(":dependencies is not a literal vector", path=path)
    deps = []
    for entry in value.items:
        if (
            not isinstance(entry, Seq)
            or entry.kind != "vector"
            or len(entry.items) < 2
            or not isinstance(entry.items[0], Symbol)
            or not isinstance(entry.items[1], str)
        ):
            raise ManifestParseError(
                f"Dependency entry is not [name \"version\" ...]: {entry!r}", path=path,
            )
        deps.append(Dependency(_coordinate(entry.items[0], path), entry.items[1]))
    return tuple(deps)


def _manifest_dir(path: str) -> str:
    return path.rpartition("/")[0] if "/" in path else ""
