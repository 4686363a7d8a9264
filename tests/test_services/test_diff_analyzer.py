"""Tests for unified diff parsing and change classification."""

import pytest

from designproof.services.diff_analyzer import DiffAnalyzer


class TestDiffAnalyzerParse:
    """Test hunk parsing and line numbering."""

    @pytest.fixture
    def analyzer(self):
        return DiffAnalyzer()

    def test_line_numbering(self, analyzer):
        """Context, additions and removals are numbered from the header."""
        patch = """@@ -10,3 +10,4 @@ class Foo:
 a
-b
+B
+C
 d"""

        diff = analyzer.parse(patch, filename="foo.py")

        assert len(diff.hunks) == 1
        hunk = diff.hunks[0]
        assert (hunk.old_start, hunk.old_count, hunk.new_start, hunk.new_count) == (10, 3, 10, 4)
        assert hunk.section == "class Foo:"
        numbering = [(l.type, l.content, l.old_line_no, l.new_line_no) for l in hunk.lines]
        assert numbering == [
            ("context", "a", 10, 10),
            ("removal", "b", 11, None),
            ("addition", "B", None, 11),
            ("addition", "C", None, 12),
            ("context", "d", 12, 13),
        ]
        assert diff.changed_line_numbers == [11, 12]
        assert diff.total_additions == 2
        assert diff.total_deletions == 1

    def test_parse_simple_diff(self, analyzer):
        """A new file's lines are numbered from 1."""
        patch = """@@ -0,0 +1,3 @@
+line 1
+line 2
+line 3"""

        diff = analyzer.parse(patch)

        assert diff.changed_line_numbers == [1, 2, 3]
        assert diff.added_content == "line 1\nline 2\nline 3"

    @pytest.mark.parametrize("separator", ["\x0c", "\x0b", "\x1c", "\x85", "\u2028", "\u2029"])
    def test_only_newline_ends_a_line(self, analyzer, separator):
        """Form feeds and other line separators stay inside their line."""
        diff = analyzer.parse(f"@@ -1,2 +1,3 @@\n a\n+{separator}\n+b")

        numbering = [(l.type, l.content, l.new_line_no) for l in diff.hunks[0].lines]
        assert numbering == [
            ("context", "a", 1),
            ("addition", separator, 2),
            ("addition", "b", 3),
        ]
        assert diff.changed_line_numbers == [2, 3]

    def test_crlf_line_endings(self, analyzer):
        """Carriage returns before the newline are not content."""
        diff = analyzer.parse("@@ -1,1 +1,2 @@\r\n a\r\n+b\r\n")

        numbering = [(l.type, l.content, l.new_line_no) for l in diff.hunks[0].lines]
        assert numbering == [("context", "a", 1), ("addition", "b", 2)]

    def test_trailing_newline_adds_no_line(self, analyzer):
        """A patch ending in a newline has no extra context line."""
        diff = analyzer.parse("@@ -1,1 +1,2 @@\n a\n+b\n")

        assert len(diff.hunks[0].lines) == 2

    def test_counts_default_to_one(self, analyzer):
        """Omitted hunk counts default to 1."""
        diff = analyzer.parse("@@ -5 +5 @@\n-old\n+new")

        hunk = diff.hunks[0]
        assert hunk.old_count == 1
        assert hunk.new_count == 1
        assert hunk.section is None

    def test_multiple_hunks(self, analyzer):
        """Each header starts a new hunk with its own numbering."""
        patch = """@@ -1,3 +1,4 @@
 line 1
+new line 2
 line 3
 line 4
@@ -10,2 +11,3 @@
 line 10
+new line 11
 line 12"""

        diff = analyzer.parse(patch)

        assert len(diff.hunks) == 2
        assert diff.changed_line_numbers == [2, 12]
        assert diff.hunks[0].modified_lines_count == 1

    def test_file_headers_are_ignored(self, analyzer):
        """Lines before the first hunk header are skipped."""
        patch = """--- a/foo.py
+++ b/foo.py
@@ -1 +1 @@
-x = 1
+x = 2"""

        diff = analyzer.parse(patch)

        assert diff.total_additions == 1
        assert diff.total_deletions == 1

    def test_no_newline_marker_is_ignored(self, analyzer):
        """The no-newline marker neither adds a line nor shifts numbering."""
        patch = """@@ -1,2 +1,2 @@
 a
-b
\\ No newline at end of file
+c
\\ No newline at end of file"""

        diff = analyzer.parse(patch)

        assert [l.content for l in diff.hunks[0].lines] == ["a", "b", "c"]
        assert diff.changed_line_numbers == [2]

    @pytest.mark.parametrize("patch", ["", None])
    def test_empty_patch(self, analyzer, patch):
        """Empty input gives an empty diff."""
        diff = analyzer.parse(patch, filename="empty.py")

        assert diff.is_empty
        assert diff.hunks == ()
        assert diff.changed_line_numbers == []
        assert diff.summary == "No changes"

    def test_malformed_header(self, analyzer):
        """A broken hunk header gives an empty diff instead of raising."""
        diff = analyzer.parse("@@ -a,b +c @@\n+x")

        assert diff.is_empty

    def test_summary(self, analyzer):
        """Summary reports additions, deletions and hunks."""
        diff = analyzer.parse("@@ -1 +1,2 @@\n-a\n+b\n+c")

        assert diff.summary == "2 addition(s), 1 deletion(s) in 1 hunk(s)"


class TestDiffAnalyzerChanges:
    """Test change classification."""

    @pytest.fixture
    def analyzer(self):
        return DiffAnalyzer()

    def test_methods_and_classes(self, analyzer):
        """Added and removed definitions are extracted by name."""
        patch = """@@ -1,2 +1,5 @@
-def old_helper():
-    pass
+class PaymentGateway:
+    def charge(self, amount):
+        if amount > 0:
+            return Receipt(amount)
+        return None"""

        changes = analyzer.analyze_changes(analyzer.parse(patch))

        assert changes.methods_added == ("charge",)
        assert changes.methods_removed == ("old_helper",)
        assert changes.classes_added == ("PaymentGateway",)
        assert changes.has_new_conditionals
        assert changes.has_new_instantiations
        assert not changes.has_new_dependencies
        assert changes.total_changes == 7

    def test_new_dependencies(self, analyzer):
        """Import lines mark new dependencies."""
        patch = "@@ -1 +1,2 @@\n import os\n+from app.db import Session"

        changes = analyzer.analyze_changes(analyzer.parse(patch))

        assert changes.has_new_dependencies

    def test_complexity_indicators(self, analyzer):
        """Complexity indicators count constructs in added lines only."""
        patch = """@@ -1,2 +1,4 @@
-if old:
-    pass
+for item in items:
+    while item.next():
+        with lock:
+            item.save()"""

        changes = analyzer.analyze_changes(analyzer.parse(patch))

        assert changes.complexity_indicators["conditionals"] == 0
        assert changes.complexity_indicators["loops"] == 2
        assert changes.complexity_indicators["blocks"] == 1
        assert changes.complexity_indicators["method_calls"] == 2

    def test_empty_diff(self, analyzer):
        """An empty diff has no changes."""
        changes = analyzer.analyze_changes(analyzer.parse(""))

        assert changes.methods_added == ()
        assert changes.total_changes == 0
        assert not changes.has_new_conditionals
