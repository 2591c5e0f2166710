"""Tests for ignore pattern matching and the .pewc resolver"""

from __future__ import annotations

from pathlib import Path

import pytest

from pew.errors import ConfigFileError
from pew.ignore import (
    DEFAULT_PATTERNS,
    IgnorePattern,
    IgnoreSet,
    matches,
    resolve_ignore_set,
)


class TestIgnorePattern:
    """Tests for derived pattern flags"""

    def test_directory_only_flag(self):
        pattern = IgnorePattern("node_modules/")
        assert pattern.dir_only
        assert pattern.text == "node_modules"
        assert not pattern.has_wildcard

    def test_wildcard_flag(self):
        assert IgnorePattern("*.log").has_wildcard
        assert IgnorePattern("file?.txt").has_wildcard
        assert not IgnorePattern("README.md").has_wildcard

    def test_malformed_glob_has_no_regex(self):
        assert IgnorePattern("*[abc").regex is None
        assert IgnorePattern("*[z-a]").regex is None
        assert IgnorePattern("*\\").regex is None


class TestDirectoryOnly:
    """Directory-only patterns never match plain files"""

    @pytest.mark.parametrize("pattern", ["node_modules/", "build/", "*.d/", ".git/", "a?/"])
    @pytest.mark.parametrize("path", ["node_modules", "build", "x.d", ".git", "ab", "src/build"])
    def test_never_matches_files(self, pattern, path):
        assert matches(path, False, pattern) is False

    def test_matches_directories(self):
        assert matches("node_modules", True, "node_modules/")
        assert matches("web/node_modules", True, "node_modules/")
        assert matches("x.d", True, "*.d/")


class TestLiteralPatterns:
    """Literal patterns match the basename or the whole path"""

    def test_basename_match(self):
        assert matches("README.md", False, "README.md")
        assert matches("docs/README.md", False, "README.md")

    def test_full_path_match(self):
        assert matches("src/main.x", False, "src/main.x")

    def test_full_path_pattern_does_not_match_nested_copy(self):
        assert not matches("other/src/main.x", False, "src/main.x")

    def test_intermediate_segment_is_not_a_basename(self):
        assert not matches("secret/notes.txt", False, "secret")

    def test_case_sensitive(self):
        assert not matches("readme.md", False, "README.md")

    def test_brackets_are_literal_without_wildcard(self):
        assert matches("[ab].txt", False, "[ab].txt")
        assert not matches("a.txt", False, "[ab].txt")

    def test_absolute_path_equals_pattern(self):
        assert matches("/abs/main.x", False, "/abs/main.x")
        assert not matches("abs/main.x", False, "/abs/main.x")

    def test_leading_dot_slash_is_not_stripped(self):
        assert matches("./a.txt", False, "./a.txt")
        assert not matches("a.txt", False, "./a.txt")
        assert matches("./a.txt", False, "a.txt")


class TestWildcardPatterns:
    """Wildcard patterns match the full path or any single segment"""

    @pytest.mark.parametrize("path", ["a.log", "dir/b.log", "dir/sub/c.log"])
    def test_star_log_matches_at_any_depth(self, path):
        assert matches(path, False, "*.log")

    def test_star_log_does_not_match_longer_extension(self):
        assert not matches("a.logx", False, "*.log")

    def test_star_does_not_cross_slash(self):
        assert not matches("a/b", False, "a*b")

    def test_question_mark_matches_exactly_one_character(self):
        assert matches("file1.txt", False, "file?.txt")
        assert not matches("file10.txt", False, "file?.txt")
        assert not matches("file.txt", False, "file?.txt")

    def test_question_mark_does_not_match_slash(self):
        assert not matches("a/b", False, "a?b")

    def test_path_pattern_with_wildcard(self):
        assert matches("doc/notes.txt", False, "doc/*.txt")
        assert not matches("doc/sub/notes.txt", False, "doc/*.txt")

    def test_hidden_pattern(self):
        assert matches(".git", True, ".*")
        assert matches("src/.env", False, ".*")
        assert not matches("src/main.x", False, ".*")

    def test_character_class(self):
        assert matches("x.c", False, "*.[ch]")
        assert matches("dir/y.h", False, "*.[ch]")
        assert not matches("z.o", False, "*.[ch]")

    def test_negated_character_class(self):
        assert matches("x.h", False, "*.[!c]")
        assert not matches("x.c", False, "*.[!c]")

    def test_escaped_wildcard(self):
        assert matches("what?.md", False, "what\\?.md")
        assert not matches("whatX.md", False, "what\\?.md")

    @pytest.mark.parametrize("pattern", ["*[abc", "*[z-a]", "*\\", "*[]"])
    def test_malformed_glob_is_a_non_match(self, pattern):
        assert matches("anything", False, pattern) is False
        assert matches("x/[abc", True, pattern) is False


class TestIgnoreSet:
    """Tests for the ordered pattern collection"""

    def test_empty_set_never_matches(self):
        ignore_set = IgnoreSet()
        assert len(ignore_set) == 0
        assert not ignore_set.match(".git", True)
        assert not ignore_set.is_ignored(Path("/proj/.git"), Path("/proj"), True)

    def test_any_pattern_ignores(self):
        ignore_set = IgnoreSet(["*.log", "dist/"])
        assert ignore_set.match("out/debug.log", False)
        assert ignore_set.match("dist", True)
        assert not ignore_set.match("dist", False)

    def test_is_ignored_uses_relative_path(self):
        ignore_set = IgnoreSet(["proj"])
        root = Path("/home/proj")
        assert not ignore_set.is_ignored(root / "src" / "main.x", root, False)
        assert ignore_set.is_ignored(root / "sub" / "proj", root, True)

    def test_is_ignored_falls_back_to_absolute_path(self):
        ignore_set = IgnoreSet(["main.x"])
        assert ignore_set.is_ignored(Path("/elsewhere/main.x"), Path("/proj"), False)

    def test_absolute_fallback_keeps_leading_slash(self):
        ignore_set = IgnoreSet(["/elsewhere/main.x"])
        assert ignore_set.is_ignored(Path("/elsewhere/main.x"), Path("/proj"), False)


class TestResolveIgnoreSet:
    """Tests for resolve_ignore_set"""

    def test_defaults_only(self, tmp_path):
        ignore_set = resolve_ignore_set(tmp_path)
        assert [p.raw for p in ignore_set] == list(DEFAULT_PATTERNS)

    def test_default_order(self):
        assert DEFAULT_PATTERNS == (
            ".*",
            "node_modules/",
            "target/",
            "dist/",
            "build/",
            "bin/",
            "pkg/",
            ".pewc",
            ".git/",
        )

    def test_defaults_disabled_without_rules_file(self, tmp_path):
        assert len(resolve_ignore_set(tmp_path, use_defaults=False)) == 0

    def test_rules_file_appended_after_defaults(self, tmp_path):
        (tmp_path / ".pewc").write_text(
            "# generated files\n\n  *.log  \ndoc/*.txt\n   # indented comment\nsecrets/\n",
            encoding="utf-8",
        )
        ignore_set = resolve_ignore_set(tmp_path)
        raws = [p.raw for p in ignore_set]
        assert raws[: len(DEFAULT_PATTERNS)] == list(DEFAULT_PATTERNS)
        assert raws[len(DEFAULT_PATTERNS):] == ["*.log", "doc/*.txt", "secrets/"]

    def test_rules_file_without_defaults(self, tmp_path):
        (tmp_path / ".pewc").write_text("vendor/\n", encoding="utf-8")
        ignore_set = resolve_ignore_set(tmp_path, use_defaults=False)
        assert [p.raw for p in ignore_set] == ["vendor/"]

    def test_rules_file_in_subdirectory_is_not_read(self, tmp_path):
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / ".pewc").write_text("*.py\n", encoding="utf-8")
        assert len(resolve_ignore_set(tmp_path, use_defaults=False)) == 0

    def test_custom_defaults(self, tmp_path):
        ignore_set = resolve_ignore_set(tmp_path, defaults=("venv/",))
        assert [p.raw for p in ignore_set] == ["venv/"]

    def test_unreadable_rules_file_raises(self, tmp_path):
        (tmp_path / ".pewc").mkdir()
        with pytest.raises(ConfigFileError, match="Could not read rules file"):
            resolve_ignore_set(tmp_path)

    def test_non_utf8_rules_file_is_read(self, tmp_path):
        (tmp_path / ".pewc").write_bytes(b"# caf\xe9 notes\n*.log\nvendor/\n")
        ignore_set = resolve_ignore_set(tmp_path, use_defaults=False)
        assert [p.raw for p in ignore_set] == ["*.log", "vendor/"]

    def test_dangling_rules_symlink_counts_as_absent(self, tmp_path):
        (tmp_path / ".pewc").symlink_to(tmp_path / "missing-rules")
        ignore_set = resolve_ignore_set(tmp_path)
        assert [p.raw for p in ignore_set] == list(DEFAULT_PATTERNS)
