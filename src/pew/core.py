"""
Core logic for pew: directory traversal, tree rendering and markdown output.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from .classify import is_text_eligible
from .errors import FileReadError, InvalidRootError, OutputError
from .ignore import IgnoreSet, resolve_ignore_set

NO_FILES_NOTICE = "No text files found in the directory.\n"

_CONTROL_BYTES = bytes(b for b in range(32) if b not in (0x09, 0x0A, 0x0D))


@dataclass(frozen=True)
class Skipped:
    """A path left out of the document because it could not be read."""

    path: Path
    reason: str


@dataclass
class ScanResult:
    root: Optional[Path]
    files: List[Path] = field(default_factory=list)
    tree: str = ""
    binaries: List[Path] = field(default_factory=list)
    skipped: List[Skipped] = field(default_factory=list)


# Root handling
def resolve_root(root: Path) -> Path:
    try:
        root = Path(root).resolve()
    except (OSError, RuntimeError) as e:
        raise InvalidRootError(f"Could not resolve root path '{root}': {e}")
    if not root.exists():
        raise InvalidRootError(f"Directory does not exist: {root}")
    if not root.is_dir():
        raise InvalidRootError(f"Root path '{root}' is not a directory")
    return root


def _list_dir(directory: Path) -> List[Tuple[Path, bool]]:
    # symlinked directories are not followed
    with os.scandir(directory) as it:
        entries = [
            (Path(entry.path), entry.is_dir(follow_symlinks=False)) for entry in it
        ]
    return sorted(entries, key=lambda e: e[0].name)


# Traversal
def scan_directory(root: Path, ignore_set: IgnoreSet) -> ScanResult:
    """
    Walk *root* once, collecting text files and the tree rendering together.

    Every entry goes through :meth:`IgnoreSet.is_ignored`; an ignored
    directory is pruned without being listed. Files that cannot be sniffed
    and subdirectories that cannot be listed end up in ``skipped``; only a
    bad root raises.
    """
    root = resolve_root(root)
    try:
        top = _list_dir(root)
    except OSError as e:
        raise InvalidRootError(f"Could not list directory '{root}': {e}")

    result = ScanResult(root=root)
    lines: List[str] = [f"{root.name}/"]

    def _walk(entries: List[Tuple[Path, bool]], prefix: str) -> None:
        visible = [
            (p, is_dir)
            for p, is_dir in entries
            if not ignore_set.is_ignored(p, root, is_dir)
        ]
        for idx, (p, is_dir) in enumerate(visible):
            last = idx == len(visible) - 1
            connector = "`-- " if last else "|-- "
            lines.append(f"{prefix}{connector}{p.name}{'/' if is_dir else ''}")

            if is_dir:
                try:
                    children = _list_dir(p)
                except OSError as e:
                    result.skipped.append(Skipped(p, str(e)))
                    continue
                _walk(children, prefix + ("    " if last else "|   "))
                continue

            try:
                text = is_text_eligible(p)
            except OSError as e:
                result.skipped.append(Skipped(p, f"could not check file type: {e}"))
                continue
            (result.files if text else result.binaries).append(p)

    _walk(top, "")
    result.files.sort(key=str)
    result.tree = "\n".join(lines) + "\n"
    return result


def collect_eligible_files(root: Path, ignore_set: IgnoreSet) -> List[Path]:
    """Sorted absolute paths of every non-ignored text file under *root*."""
    return scan_directory(root, ignore_set).files


def render_tree(root: Path, ignore_set: IgnoreSet) -> str:
    return scan_directory(root, ignore_set).tree


# Content helpers
def sanitize_content(data: bytes) -> str:
    """Drop control bytes other than tab, LF and CR, then decode as UTF-8."""
    return data.translate(None, _CONTROL_BYTES).decode("utf-8", errors="replace")


def fence_language(path: Path) -> str:
    _, dot, ext = Path(path).name.rpartition(".")
    return ext if dot and ext else "text"


def read_file_content(path: Path) -> str:
    try:
        return sanitize_content(Path(path).read_bytes())
    except OSError as e:
        raise FileReadError(f"Could not read file {path}: {e}")


def _code_block(heading: str, path: Path, text: str) -> str:
    parts = [f"## {heading}\n\n", f"```{fence_language(path)}\n", text]
    if text and not text.endswith("\n"):
        parts.append("\n")
    parts.append("```\n\n")
    return "".join(parts)


# Markdown assembly
def render_directory_markdown(result: ScanResult) -> str:
    """
    Format a scan as ``# Directory Structure`` plus ``# File Contents``.

    Files that disappear or become unreadable between the scan and this
    call are appended to ``result.skipped``.
    """
    out = ["# Directory Structure\n\n", "```\n", result.tree, "```\n\n"]
    out.append("# File Contents\n\n")

    written = 0
    for p in result.files:
        try:
            rel = p.relative_to(result.root).as_posix()
        except ValueError:
            rel = p.as_posix()
        try:
            text = read_file_content(p)
        except FileReadError as e:
            result.skipped.append(Skipped(p, str(e)))
            continue
        out.append(_code_block(rel, p, text))
        written += 1

    if written == 0:
        out.append(NO_FILES_NOTICE)
    return "".join(out)


def render_files_markdown(paths: Iterable[Path]) -> Tuple[str, ScanResult]:
    """Format explicitly named files, in the order given, skipping binaries."""
    result = ScanResult(root=None)
    out = ["# Source Code Files\n\n"]
    for p in map(Path, paths):
        try:
            eligible = is_text_eligible(p)
        except OSError as e:
            result.skipped.append(Skipped(p, f"could not check file type: {e}"))
            continue
        if not eligible:
            result.binaries.append(p)
            continue
        try:
            text = read_file_content(p)
        except FileReadError as e:
            result.skipped.append(Skipped(p, str(e)))
            continue
        result.files.append(p)
        out.append(_code_block(str(p), p, text))
    return "".join(out), result


def dump_directory(root: Path, use_defaults: bool = True) -> Tuple[str, ScanResult]:
    """Resolve ignores for *root*, scan it and render the markdown document."""
    root = resolve_root(root)
    ignore_set = resolve_ignore_set(root, use_defaults=use_defaults)
    result = scan_directory(root, ignore_set)
    return render_directory_markdown(result), result


# Output
def write_markdown(out_path: Path, text: str) -> Path:
    try:
        out_path = Path(out_path).resolve()
    except (OSError, RuntimeError) as e:
        raise OutputError(f"Could not resolve output path '{out_path}': {e}")

    if not out_path.parent.exists():
        try:
            out_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputError(f"Could not create directory '{out_path.parent}': {e}")

    try:
        with out_path.open("w", encoding="utf-8", newline="\n") as out_fh:
            out_fh.write(text)
    except OSError as e:
        raise OutputError(f"Could not write to output file '{out_path}': {e}")
    return out_path
