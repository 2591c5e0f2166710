"""
Ignore patterns: built-in defaults, the ``.pewc`` rules file and matching.
"""

from __future__ import annotations

import os
import posixpath
import re
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from pathspec.pattern import RegexPattern

from .errors import ConfigFileError

RULES_FILE = ".pewc"

DEFAULT_PATTERNS: Tuple[str, ...] = (
    ".*",
    "node_modules/",
    "target/",
    "dist/",
    "build/",
    "bin/",
    "pkg/",
    RULES_FILE,
    ".git/",
)


def _to_slash(path: str) -> str:
    # separators only; leading "/" and "./" are kept
    return path.replace(os.sep, "/") if os.sep != "/" else path


def _glob_to_regex(glob: str) -> Optional[str]:
    """
    Translate a shell glob into an anchored regex.

    ``*`` and ``?`` never cross a ``/``. ``[...]`` classes (``!`` or ``^``
    negates) and ``\\`` escapes are honoured. Returns ``None`` for a
    malformed glob: unterminated class, empty class or trailing escape.
    """
    out: List[str] = []
    i, n = 0, len(glob)
    while i < n:
        ch = glob[i]
        i += 1
        if ch == "*":
            out.append("[^/]*")
        elif ch == "?":
            out.append("[^/]")
        elif ch == "\\":
            if i == n:
                return None
            out.append(re.escape(glob[i]))
            i += 1
        elif ch == "[":
            negate = i < n and glob[i] in "!^"
            if negate:
                i += 1
            body: List[str] = []
            while i < n and glob[i] != "]":
                c = glob[i]
                if c == "\\":
                    i += 1
                    if i == n:
                        return None
                    body.append(re.escape(glob[i]))
                elif c == "-" and body:
                    body.append("-")
                else:
                    body.append(re.escape(c))
                i += 1
            if i == n or not body:
                return None
            i += 1  # closing bracket
            cls = "".join(body)
            out.append(f"[^/{cls}]" if negate else f"(?!/)[{cls}]")
        else:
            out.append(re.escape(ch))
    return "^" + "".join(out) + r"\Z"


class IgnorePattern(RegexPattern):
    """
    One ignore pattern as written in the defaults or in ``.pewc``.

    ``dir_only`` is set for patterns ending in ``/`` (the slash is stripped
    into :attr:`text`); ``has_wildcard`` for patterns containing ``*`` or
    ``?``. The inherited :attr:`regex` holds the glob translation of
    :attr:`text`, or ``None`` when the glob is malformed.
    """

    __slots__ = ("raw", "text", "dir_only", "has_wildcard")

    def __init__(self, pattern: str) -> None:
        raw = _to_slash(pattern)
        self.raw = raw
        self.dir_only = raw.endswith("/")
        self.text = raw[:-1] if self.dir_only else raw
        self.has_wildcard = "*" in raw or "?" in raw
        super().__init__(self.text)

    @classmethod
    def pattern_to_regex(cls, pattern: str) -> Tuple[Optional[str], Optional[bool]]:
        regex = _glob_to_regex(pattern)
        if regex is None:
            return None, None
        try:
            re.compile(regex)
        except re.error:
            # e.g. a reversed range like "[z-a]"
            return None, None
        return regex, True

    def __repr__(self) -> str:
        return f"IgnorePattern({self.raw!r})"


PatternLike = Union[str, IgnorePattern]


def matches(path: str, is_directory: bool, pattern: PatternLike) -> bool:
    """
    Return whether *path* (relative, any separator) matches *pattern*.

    Wildcard patterns are tried against the whole path and then against
    each ``/``-separated segment, so ``*.log`` hits ``dir/sub/c.log``.
    Literal patterns must equal the basename or the whole path.
    """
    if not isinstance(pattern, IgnorePattern):
        pattern = IgnorePattern(pattern)
    if pattern.dir_only and not is_directory:
        return False

    path = _to_slash(os.fspath(path))
    if pattern.has_wildcard:
        if pattern.regex is None:
            return False
        if pattern.regex.match(path):
            return True
        return any(pattern.regex.match(part) for part in path.split("/"))

    return pattern.text == posixpath.basename(path) or pattern.text == path


class IgnoreSet:
    """Ordered, immutable collection of ignore patterns for one traversal."""

    def __init__(self, patterns: Iterable[PatternLike] = ()) -> None:
        self.patterns: Tuple[IgnorePattern, ...] = tuple(
            p if isinstance(p, IgnorePattern) else IgnorePattern(p) for p in patterns
        )

    def __iter__(self) -> Iterator[IgnorePattern]:
        return iter(self.patterns)

    def __len__(self) -> int:
        return len(self.patterns)

    def __repr__(self) -> str:
        return f"IgnoreSet({[p.raw for p in self.patterns]!r})"

    def match(self, rel_path: str, is_directory: bool) -> bool:
        return any(matches(rel_path, is_directory, p) for p in self.patterns)

    def is_ignored(self, path: Path, root: Path, is_directory: bool) -> bool:
        """Prune decision shared by file collection and tree rendering."""
        if not self.patterns:
            return False
        try:
            rel = path.relative_to(root).as_posix()
        except ValueError:
            rel = path.as_posix()
        return self.match(rel, is_directory)


def load_rules_file(rules_path: Path) -> List[str]:
    """Read one pattern per line, skipping blanks and ``#`` comments."""
    try:
        with rules_path.open("r", encoding="utf-8", errors="surrogateescape") as fh:
            return [
                ln.strip()
                for ln in fh
                if ln.strip() and not ln.strip().startswith("#")
            ]
    except OSError as e:
        raise ConfigFileError(f"Could not read rules file '{rules_path}': {e}")


def resolve_ignore_set(
    root_dir: Path,
    use_defaults: bool = True,
    defaults: Iterable[str] = DEFAULT_PATTERNS,
) -> IgnoreSet:
    """Built-in patterns (unless disabled) followed by ``root_dir/.pewc``."""
    patterns: List[str] = list(defaults) if use_defaults else []
    rules_path = Path(root_dir) / RULES_FILE
    # a dangling symlink counts as absent
    if rules_path.exists():
        patterns.extend(load_rules_file(rules_path))
    return IgnoreSet(patterns)
