"""Line-local heuristic that counts meaningful added/removed lines in a diff.

No hunk or file parsing happens here: every ``+``/``-`` line is judged
on its own, which keeps the counter cheap enough to run over a whole
page of pull requests before any text generation starts.
"""

import re

_COMMENT_MARKERS = ("//", "/*")

# A hash comment needs whitespace or nothing after the "#", which leaves
# "#include", "#define" and "#[derive(...)]" counted as code.
_HASH_COMMENT_RE = re.compile(r"#(?:\s|$)")

# Version-bearing contexts only: a version key, a pinned requirement
# ("requests==2.31.0", "lodash@4.17.21"), a quoted range ("^18.3.1"),
# a quoted three-part version or a "v"-prefixed tag.  Plain decimals
# such as "0.5", "timeout=2.5" or "10.0.0.1" do not match.
_VERSION_RE = re.compile(
    r"\bversion\b\s*[\"']?\s*[:=]"
    r"|[A-Za-z][\w.\-\[\]]*(?:==|>=|<=|~=|!=)v?\d+(?:\.\d+)+"
    r"|[\w\-/]@v?\d+(?:\.\d+)+"
    r"|[\"'](?:[\^~]|[<>]=?)v?\d+(?:\.\d+)+"
    r"|[\"']v?\d+\.\d+\.\d+(?:[-+][\w.]*)?[\"']"
    r"|\bv\d+\.\d+(?:\.\d+)?\b",
    re.IGNORECASE,
)

# Dependency-manifest section keys (package.json, pyproject, setup.py, ...).
_MANIFEST_KEY_RE = re.compile(
    r"[\"']?\b(?:dependencies|devDependencies|peerDependencies|optionalDependencies"
    r"|install_requires|requires|require-dev)\b[\"']?\s*[:=\[]",
    re.IGNORECASE,
)


def _is_comment(text: str) -> bool:
    return text.startswith(_COMMENT_MARKERS) or bool(_HASH_COMMENT_RE.match(text))


def is_version_line(line: str) -> bool:
    """Return ``True`` if *line* looks like a version bump or manifest key."""
    return bool(_VERSION_RE.search(line) or _MANIFEST_KEY_RE.search(line))


def is_meaningful_change(line: str, ignore_version_lines: bool = False) -> bool:
    """Decide whether a single ``+``/``-`` diff line counts as a real change."""
    stripped = line.strip()
    body = stripped[1:].strip() if stripped[:1] in ("+", "-") else stripped

    if not stripped or not body:
        return False

    if _is_comment(stripped) or _is_comment(body):
        return False

    # Pure whitespace changes collapse to a bare marker.
    if re.sub(r"\s+", "", line) in ("+", "-"):
        return False

    if ignore_version_lines and is_version_line(line):
        return False

    return True


def count_meaningful_changes(diff: str, ignore_version_lines: bool = False) -> int:
    """Count added/removed lines of *diff* that are not trivial.

    Context lines are ignored.  A changed line is dropped when it is
    blank, a comment, whitespace-only, or (with *ignore_version_lines*)
    a version number or dependency-manifest key.
    """
    return sum(
        1
        for line in diff.split("\n")
        if line.startswith(("+", "-"))
        and is_meaningful_change(line, ignore_version_lines)
    )
