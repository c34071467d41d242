"""Tests for treecat.filter."""

from pathlib import Path

import pytest

from treecat.filter import (
    DEFAULT_EXCLUDE,
    DEFAULT_INCLUDE,
    PatternError,
    PatternFilter,
    glob_match,
    matches,
    translate,
)
from treecat.scanner import Entry


def _entry(rel_path: str, is_dir: bool = False) -> Entry:
    name = rel_path.rsplit("/", 1)[-1]
    return Entry(
        path=Path("/fake/root") / rel_path,
        rel_path=rel_path,
        name=name,
        is_dir=is_dir,
    )


def _matches(patterns: list[str], rel_path: str, is_dir: bool = False) -> bool:
    return matches(patterns, rel_path, rel_path.rsplit("/", 1)[-1], is_dir)


class TestGlobMatch:
    @pytest.mark.parametrize(
        ("pattern", "text", "expected"),
        [
            ("*.py", "app.py", True),
            ("*.py", "app.pyc", False),
            ("?.txt", "a.txt", True),
            ("?.txt", "ab.txt", False),
            ("[ab].txt", "b.txt", True),
            ("[!ab].txt", "c.txt", True),
            ("[!ab].txt", "a.txt", False),
            ("[^ab].txt", "a.txt", False),
            ("[a-c]x", "bx", True),
            ("[a-c]x", "dx", False),
            ("\\*.txt", "*.txt", True),
            ("\\*.txt", "a.txt", False),
            ("a.txt", "a.txt", True),
            ("", "", True),
            ("", "a", False),
        ],
    )
    def test_name_globs(self, pattern: str, text: str, expected: bool) -> None:
        assert glob_match(pattern, text) is expected

    def test_star_does_not_cross_separator(self) -> None:
        assert glob_match("*", "a/b") is False
        assert glob_match("*", "a/b", recursive=True) is False
        assert glob_match("a?b", "a/b") is False

    def test_class_does_not_match_separator(self) -> None:
        assert glob_match("a[!x]b", "a/b", recursive=True) is False
        assert glob_match("a[/]b", "a/b", recursive=True) is False

    @pytest.mark.parametrize(
        ("pattern", "text", "expected"),
        [
            ("**", "a/b/c", True),
            ("**/c", "c", True),
            ("**/c", "a/b/c", True),
            ("a/**/b", "a/b", True),
            ("a/**/b", "a/x/y/b", True),
            ("a/**", "a/x/y", True),
            ("a/**", "b/x", False),
            ("a**", "a/x", True),
        ],
    )
    def test_recursive_globs(self, pattern: str, text: str, expected: bool) -> None:
        assert glob_match(pattern, text, recursive=True) is expected

    def test_double_star_is_single_segment_without_recursion(self) -> None:
        assert glob_match("**", "a/b") is False
        assert glob_match("**", "ab") is True

    @pytest.mark.parametrize("pattern", ["[abc", "abc\\", "[]", "[z-a]", "[a-\\"])
    def test_malformed_pattern_never_matches(self, pattern: str) -> None:
        assert glob_match(pattern, "abc") is False
        assert glob_match(pattern, pattern, recursive=True) is False


class TestTranslate:
    @pytest.mark.parametrize("pattern", ["[abc", "abc\\", "[]", "[!]", "[z-a]"])
    def test_malformed_raises(self, pattern: str) -> None:
        with pytest.raises(PatternError):
            translate(pattern)

    def test_literal_characters_are_escaped(self) -> None:
        assert glob_match("a+b(c).txt", "a+b(c).txt") is True
        assert glob_match("a.txt", "abtxt") is False


class TestMatches:
    @pytest.mark.parametrize(
        ("patterns", "rel_path", "is_dir", "expected"),
        [
            # base-name match at any depth
            (["*.go"], "a/b/main.go", False, True),
            (["*.go"], "a/b/main.py", False, False),
            # directory-only patterns
            (["node_modules/"], "node_modules", True, True),
            (["node_modules/"], "deep/node_modules", True, True),
            (["node_modules/"], "node_modules", False, False),
            # root-anchored patterns
            (["/dist/"], "dist", True, True),
            (["/dist/"], "src/dist", True, False),
            (["dist/"], "src/dist", True, True),
            (["/dist/**"], "dist/a/b.js", False, True),
            (["/dist/**"], "src/dist/a.js", False, False),
            (["/src/*.py"], "src/app.py", False, True),
            (["/src/*.py"], "src/gen/model.py", False, False),
            (["/src/**/*.py"], "src/gen/model.py", False, True),
            (["/src/**/*.py"], "src/app.py", False, True),
            # bare directory paths match at any depth
            (["src/gen"], "src/gen", True, True),
            (["src/gen"], "lib/src/gen", True, True),
            (["src/gen"], "src/other", True, False),
            # first success wins, order does not matter for the result
            (["*.md", "*.py"], "x/app.py", False, True),
            (["[bad", "*.py"], "app.py", False, True),
            (["[bad"], "[bad", False, False),
        ],
    )
    def test_pattern_rules(
        self,
        patterns: list[str],
        rel_path: str,
        is_dir: bool,
        expected: bool,
    ) -> None:
        assert _matches(patterns, rel_path, is_dir) is expected

    @pytest.mark.parametrize("pattern", ["*/", "vendor/", "/vendor/", "**/"])
    @pytest.mark.parametrize("rel_path", ["vendor", "a/vendor", "vendor.txt"])
    def test_directory_pattern_never_matches_file(
        self, pattern: str, rel_path: str
    ) -> None:
        assert _matches([pattern], rel_path, is_dir=False) is False

    def test_anchored_pattern_ignores_base_name(self) -> None:
        assert matches(["a.txt"], "sub/a.txt", "a.txt", False) is True
        assert matches(["/a.txt"], "sub/a.txt", "a.txt", False) is False
        assert matches(["/a.txt"], "a.txt", "a.txt", False) is True

    @pytest.mark.parametrize(
        ("rel_path", "is_dir"),
        [("a.txt", False), ("x/y/z.bin", False), ("vendor", True), ("a/b", True)],
    )
    def test_default_include_selects_everything(
        self, rel_path: str, is_dir: bool
    ) -> None:
        assert _matches(DEFAULT_INCLUDE, rel_path, is_dir) is True

    @pytest.mark.parametrize(
        ("rel_path", "is_dir"),
        [("a.txt", False), ("x/y/z.bin", False), ("vendor", True), ("a/b", True)],
    )
    def test_default_exclude_excludes_nothing(
        self, rel_path: str, is_dir: bool
    ) -> None:
        assert _matches(DEFAULT_EXCLUDE, rel_path, is_dir) is False

    def test_empty_pattern_list_matches_nothing(self) -> None:
        assert _matches([], "a.txt") is False


class TestPatternFilter:
    def test_no_patterns_matches_nothing(self) -> None:
        f = PatternFilter()
        assert f.matches(_entry("foo.py")) is False
        assert f.matches(_entry("node_modules", is_dir=True)) is False

    def test_multiple_patterns(self) -> None:
        f = PatternFilter(["*.pyc", "node_modules/", "/build/"])
        assert f.matches(_entry("src/foo.pyc")) is True
        assert f.matches(_entry("web/node_modules", is_dir=True)) is True
        assert f.matches(_entry("build", is_dir=True)) is True
        assert f.matches(_entry("src/build", is_dir=True)) is False
        assert f.matches(_entry("src", is_dir=True)) is False

    def test_patterns_are_copied(self) -> None:
        source = ["*.py"]
        f = PatternFilter(source)
        source.append("*.md")
        assert f.patterns == ("*.py",)
        assert "*.py" in repr(f)
