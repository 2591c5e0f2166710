"""
CLI entrypoint for pew.
"""
import argparse
import sys
from pathlib import Path
from typing import List, Optional

from colorama import Fore, Style, just_fix_windows_console

from . import __version__
from .core import ScanResult, dump_directory, render_files_markdown, write_markdown
from .errors import PewError

USAGE_EXAMPLES = """\
examples:
  dump specific files
    pew file1.go file2.go -o output.md
  dump a directory with default ignores
    pew -d /path/to/project -o project.md
  dump a directory without default ignores
    pew -d /path/to/project --no-default-ignores -o project.md
"""


def _warn(msg: str) -> None:
    print(Fore.YELLOW + msg + Style.RESET_ALL, file=sys.stderr)


def _info(msg: str, verbose: bool) -> None:
    if verbose:
        print(f"[pew] {msg}")


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="pew",
        description="Dump source code files or a directory into a Markdown file.",
        epilog=USAGE_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("files", nargs="*", type=Path, help="Files to dump")
    p.add_argument(
        "-d",
        "--dir",
        type=Path,
        help="Directory to dump (mutually exclusive with specifying files)",
    )
    p.add_argument(
        "-o",
        "--out",
        type=Path,
        default=Path("source.md"),
        help="Output Markdown file (default: source.md)",
    )
    p.add_argument(
        "--no-default-ignores",
        action="store_true",
        help="Disable default ignore patterns for directories like .git, node_modules, etc.",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    ns = p.parse_args(argv)
    if ns.dir is not None and ns.files:
        p.error("-d/--dir cannot be combined with input files")
    return ns


def _report(result: ScanResult) -> None:
    for binary in result.binaries:
        print(f"Skipping binary file: {binary}")
    for skipped in result.skipped:
        _warn(f"Warning: skipped {skipped.path}: {skipped.reason}")


def main(argv: Optional[List[str]] = None) -> None:
    just_fix_windows_console()
    try:
        ns = _parse_args(argv)

        if ns.dir is not None:
            _info(f"Scanning {ns.dir} …", ns.verbose)
            markdown, result = dump_directory(
                ns.dir, use_defaults=not ns.no_default_ignores
            )
        elif ns.files:
            markdown, result = render_files_markdown(ns.files)
        else:
            print("Error: no input files provided", file=sys.stderr)
            sys.exit(1)

        _report(result)
        _info(
            f"{len(result.files)} text files kept, "
            f"{len(result.binaries)} binary, {len(result.skipped)} unreadable.",
            ns.verbose,
        )

        out_path = write_markdown(ns.out, markdown)
        print(Fore.GREEN + f"Successfully wrote Markdown to {ns.out}" + Style.RESET_ALL)
        _info(f"Done → {out_path}", ns.verbose)

    except PewError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
