"""Rewrite rules: source-pattern compilation and destination substitution.

Source patterns are anchored at both ends and case-sensitive::

    "/(.*)"             -> any path, including "/"      ($1)
    "/blog/:slug"       -> one segment                  (:slug)
    "/docs/:rest*"      -> "/docs" plus zero or more segments
    "/files/:rest+"     -> one or more segments
    "/lang/:code?"      -> an optional segment
    "/old/(\\d+)/:name" -> regex groups and named segments mix

Destinations reuse captures as ``$1``/``$2`` (parenthesized groups, in
order) and ``:name`` or ``$name`` (named segments).

Rules are compiled once per deployment into a ``RuleSet`` and evaluated
in declaration order; the first match wins.
"""

import logging
import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

from perch.errors import PatternError

logger = logging.getLogger("perch.rewrites")

_NAME = re.compile(r"[A-Za-z_]\w*")
_SUBSTITUTION = re.compile(r"\$(\d+|[A-Za-z_]\w*)|:([A-Za-z_]\w*)")

# Regex bodies for named segments, keyed by modifier
_SEGMENT = r"[^/]+"
_SEGMENTS = r"[^/]+(?:/[^/]+)*"


@dataclass(frozen=True, slots=True)
class RewriteRule:
    """One ``{source, destination}`` pair, exactly as configured."""

    source: str
    destination: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "RewriteRule":
        """Build a rule from a ``{"source": ..., "destination": ...}`` object.

        Raises ``TypeError`` if either key is missing or not a string.
        """
        source = data.get("source")
        destination = data.get("destination")
        if not isinstance(source, str) or not isinstance(destination, str):
            msg = f"rewrite needs string 'source' and 'destination', got {dict(data)!r}"
            raise TypeError(msg)
        return cls(source=source, destination=destination)

    def __str__(self) -> str:
        return f"{self.source} -> {self.destination}"


@dataclass(frozen=True, slots=True)
class CompiledPattern:
    """A compiled source pattern.

    ``groups`` maps ``"1"``, ``"2"``, ... and named segments to the
    internal regex group that captures them.
    """

    source: str
    regex: re.Pattern[str]
    groups: tuple[tuple[str, str], ...]

    def match(self, path: str) -> dict[str, str] | None:
        """Match *path* against the whole pattern; return the captures."""
        found = self.regex.fullmatch(path)
        if found is None:
            return None
        return {key: found.group(group) or "" for key, group in self.groups}


def compile_pattern(source: str) -> CompiledPattern:
    """Compile a rewrite source into an anchored regex.

    Raises ``PatternError`` if the source is malformed.
    """
    if not source.startswith("/"):
        raise PatternError(source, "must start with '/'")

    parts: list[str] = []
    literal: list[str] = []
    groups: list[tuple[str, str]] = []
    names: set[str] = set()

    def flush() -> str:
        text = "".join(literal)
        literal.clear()
        return text

    i = 0
    while i < len(source):
        char = source[i]

        if char == "\\":
            if i + 1 == len(source):
                raise PatternError(source, "trailing backslash")
            literal.append(source[i + 1])
            i += 2
            continue

        if char == "(":
            end = _find_group_end(source, i)
            parts.append(re.escape(flush()))
            internal = f"_g{len(groups) + 1}"
            parts.append(f"(?P<{internal}>{source[i + 1 : end]})")
            groups.append((str(sum(1 for key, _ in groups if key.isdigit()) + 1), internal))
            i = end + 1
            continue

        if char == ")":
            raise PatternError(source, f"unbalanced ')' at position {i}")

        if char == ":":
            name_match = _NAME.match(source, i + 1)
            if name_match is None:
                literal.append(char)
                i += 1
                continue
            name = name_match.group()
            if name in names:
                raise PatternError(source, f"duplicate parameter ':{name}'")
            names.add(name)
            i = name_match.end()
            modifier = source[i] if i < len(source) and source[i] in "*+?" else ""
            if modifier:
                i += 1
            text = flush()
            internal = f"_n{len(groups) + 1}"
            parts.append(_named_segment(text, internal, modifier))
            groups.append((name, internal))
            continue

        literal.append(char)
        i += 1

    parts.append(re.escape(flush()))

    try:
        regex = re.compile("".join(parts))
    except re.error as exc:
        raise PatternError(source, str(exc)) from exc
    return CompiledPattern(source=source, regex=regex, groups=tuple(groups))


def _find_group_end(source: str, start: int) -> int:
    """Index of the ``)`` closing the group opened at *start*."""
    depth = 0
    i = start
    while i < len(source):
        char = source[i]
        if char == "\\":
            i += 2
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    raise PatternError(source, f"unclosed '(' at position {start}")


def _named_segment(preceding: str, internal: str, modifier: str) -> str:
    """Regex for a ``:name`` segment, folding in the slash before it.

    ``/:rest*`` and ``/:code?`` make the leading slash optional too, so
    ``/docs/:rest*`` matches ``/docs`` as well as ``/docs/a/b``.
    """
    optional = modifier in ("*", "?")
    if optional and preceding.endswith("/"):
        body = _SEGMENTS if modifier == "*" else _SEGMENT
        return f"{re.escape(preceding[:-1])}(?:/(?P<{internal}>{body}))?"
    if modifier == "*":
        return f"{re.escape(preceding)}(?P<{internal}>(?:{_SEGMENTS})?)"
    if modifier == "+":
        return f"{re.escape(preceding)}(?P<{internal}>{_SEGMENTS})"
    if modifier == "?":
        return f"{re.escape(preceding)}(?P<{internal}>{_SEGMENT})?"
    return f"{re.escape(preceding)}(?P<{internal}>{_SEGMENT})"


def substitute(destination: str, captures: Mapping[str, str]) -> str:
    """Fill ``$1``, ``$name`` and ``:name`` placeholders in *destination*.

    Placeholders with no matching capture are left as written.
    """

    def replace(match: re.Match[str]) -> str:
        key = match.group(1) or match.group(2)
        if key in captures:
            return captures[key]
        return match.group(0)

    return _SUBSTITUTION.sub(replace, destination)


def strip_query(destination: str) -> str:
    """Drop a ``?query`` or ``#fragment`` suffix from a destination."""
    for marker in ("?", "#"):
        destination = destination.split(marker, 1)[0]
    return destination


@dataclass(frozen=True, slots=True)
class RewriteMatch:
    """The first rule that matched a request, and where it points."""

    rule: RewriteRule
    destination: str
    captures: dict[str, str]


@dataclass(frozen=True, slots=True)
class _CompiledRule:
    rule: RewriteRule
    pattern: CompiledPattern | None


class RuleSet:
    """Ordered, compiled rewrite rules. Immutable after construction.

    Usage::

        rules = compile_rules([RewriteRule("/(.*)", "/index.html")])
        rules.match("/about").destination  # "/index.html"
    """

    __slots__ = ("_compiled",)

    def __init__(self, compiled: Iterable[_CompiledRule] = ()) -> None:
        self._compiled = tuple(compiled)

    def __iter__(self) -> Iterator[RewriteRule]:
        return (entry.rule for entry in self._compiled)

    def __len__(self) -> int:
        return len(self._compiled)

    def __repr__(self) -> str:
        return f"RuleSet({len(self._compiled)} rules)"

    @property
    def invalid(self) -> tuple[RewriteRule, ...]:
        """Rules whose source failed to compile (lax mode only)."""
        return tuple(entry.rule for entry in self._compiled if entry.pattern is None)

    def match(self, path: str) -> RewriteMatch | None:
        """Return the first rule matching *path*, in declaration order."""
        for entry in self._compiled:
            if entry.pattern is None:
                continue
            captures = entry.pattern.match(path)
            if captures is not None:
                destination = substitute(entry.rule.destination, captures)
                return RewriteMatch(rule=entry.rule, destination=destination, captures=captures)
        return None


def compile_rules(rules: Iterable[RewriteRule], *, strict: bool = False) -> RuleSet:
    """Compile *rules* in order.

    A malformed source raises ``PatternError`` when *strict* is set.
    Otherwise it is logged and kept as a rule that never matches.
    """
    compiled: list[_CompiledRule] = []
    for rule in rules:
        try:
            pattern = compile_pattern(rule.source)
        except PatternError as exc:
            if strict:
                raise
            logger.warning("Ignoring rewrite %s: %s", rule, exc.reason)
            pattern = None
        compiled.append(_CompiledRule(rule=rule, pattern=pattern))
    return RuleSet(compiled)
