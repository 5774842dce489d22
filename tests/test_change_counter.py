"""Tests for patchnotes.filters.change_counter: meaningful-change heuristic."""

import pytest

from patchnotes.filters.change_counter import (
    count_meaningful_changes,
    is_meaningful_change,
    is_version_line,
)
from tests.fakes import NULL_POINTER_DIFF


class TestIsMeaningfulChange:
    """Single-line classification."""

    @pytest.mark.parametrize(
        "line",
        [
            "+",
            "-",
            "+    ",
            "-\t\t",
            "+ // TODO remove",
            "-/* old block */",
            "+# comment",
            "-#",
        ],
    )
    def test_trivial_lines_are_not_meaningful(self, line):
        assert is_meaningful_change(line) is False

    @pytest.mark.parametrize(
        "line",
        [
            "+    return parse(value)",
            "-    cache.clear()",
            "+def handler(event):",
            "+#include <stdio.h>",
            "-#define MAX_DEPTH 32",
            "+#[derive(Debug, Clone)]",
        ],
    )
    def test_code_lines_are_meaningful(self, line):
        assert is_meaningful_change(line) is True

    def test_version_lines_count_unless_ignored(self):
        line = '+  "version": "2.4.1",'
        assert is_meaningful_change(line) is True
        assert is_meaningful_change(line, ignore_version_lines=True) is False


class TestIsVersionLine:
    @pytest.mark.parametrize(
        "line",
        [
            '+  "version": "1.0.0"',
            "-requests==2.31.0",
            '+  "devDependencies": {',
            "+    install_requires=[",
            "+VERSION = 3",
        ],
    )
    def test_detects_versions_and_manifest_keys(self, line):
        assert is_version_line(line) is True

    @pytest.mark.parametrize(
        "line",
        [
            "+    total = price * quantity",
            "+    ratio = total * 0.5",
            "-    client = Client(timeout=2.5)",
            "+HOST = \"10.0.0.1\"",
            "+    if score >= 1.5:",
        ],
    )
    def test_plain_code_is_not_a_version_line(self, line):
        assert is_version_line(line) is False

    @pytest.mark.parametrize(
        "line",
        ["+django>=4.2", "+    \"lodash\": \"~4.17.21\",", "+npm install left-pad@1.3.0", "+release v2.0"],
    )
    def test_detects_pins_ranges_and_tags(self, line):
        assert is_version_line(line) is True


class TestCountMeaningfulChanges:
    """Whole-diff counting."""

    def test_sample_diff_has_six_meaningful_lines(self):
        assert count_meaningful_changes(NULL_POINTER_DIFF) == 6

    def test_context_lines_are_ignored(self):
        diff = "\n".join([" unchanged = 1", " another = 2", "+added = 3"])
        assert count_meaningful_changes(diff) == 1

    def test_whitespace_only_diff_counts_zero(self):
        diff = "\n".join(["+", "-", "+   ", "-\t", "+ \t ", "-  "])
        assert count_meaningful_changes(diff) == 0

    def test_empty_diff_counts_zero(self):
        assert count_meaningful_changes("") == 0

    def test_dependency_bump_ignored_in_strict_mode(self):
        diff = "\n".join(
            [
                '-    "react": "^18.2.0",',
                '+    "react": "^18.3.1",',
                "+    render(app)",
            ]
        )
        assert count_meaningful_changes(diff) == 3
        assert count_meaningful_changes(diff, ignore_version_lines=True) == 1

    def test_float_literals_still_count_in_strict_mode(self):
        diff = "\n".join(
            [f"-ratio_{i} = total * 0.{i}" for i in range(1, 5)]
            + [f"+ratio_{i} = round(total * 0.{i}, 2)" for i in range(1, 5)]
        )
        assert count_meaningful_changes(diff, ignore_version_lines=True) == 8
