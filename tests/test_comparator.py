"""Tests for folder_diff.comparator module."""

from unittest.mock import patch

from folder_diff.comparator import compare, mark_subtree, summarize
from folder_diff.hasher import HASH_ERROR
from folder_diff.models import CompareOptions, DiffStatus
from folder_diff.scanner import scan

from conftest import make_dir, make_file


def _annotations(node):
    return [(n.name, n.status, n.contains_diff, getattr(n, "hash", None)) for n in node.walk()]


def _write_tree(root, files):
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)


class TestMarkSubtree:

    def test_marks_every_descendant(self):
        tree = make_dir("/r", make_dir("/r/d", make_file("/r/d/x")), make_file("/r/y"))
        mark_subtree(tree, DiffStatus.REMOVED)
        assert all(n.status is DiffStatus.REMOVED and n.contains_diff for n in tree.walk())


class TestCompare:
    """Tests for compare function."""

    def test_identical_trees_unchanged(self, temp_dir):
        files = {"a.txt": "one", "sub/b.txt": "two", "sub/deep/c.txt": "three"}
        _write_tree(temp_dir / "l", files)
        _write_tree(temp_dir / "r", files)
        left, right = scan(temp_dir / "l"), scan(temp_dir / "r")

        compare(left, right)

        for node in list(left.walk()) + list(right.walk()):
            assert node.status is DiffStatus.UNCHANGED
            assert node.contains_diff is False

    def test_sample_folders(self, sample_folders):
        left_path, right_path = sample_folders
        left, right = scan(left_path), scan(right_path)

        compare(left, right)

        assert left.child("identical.txt").status is DiffStatus.UNCHANGED
        assert left.child("changed.txt").status is DiffStatus.MODIFIED
        assert right.child("changed.txt").status is DiffStatus.MODIFIED
        # Same size and no content check: unchanged
        assert left.child("same_size.txt").status is DiffStatus.UNCHANGED
        assert left.child("removed_dir").status is DiffStatus.REMOVED
        assert left.child("removed_dir").child("nested.txt").status is DiffStatus.REMOVED
        assert right.child("removed_dir") is None
        assert right.child("added.txt").status is DiffStatus.ADDED
        assert left.child("docs").contains_diff is False
        assert left.contains_diff is True
        assert right.contains_diff is True

    def test_size_only_leaves_hash_unset(self, sample_folders):
        left_path, right_path = sample_folders
        left, right = scan(left_path), scan(right_path)

        with patch("folder_diff.comparator.compute_file_hash") as mock_hash:
            compare(left, right, CompareOptions(verify_content=False))

        mock_hash.assert_not_called()
        for node in list(left.walk()) + list(right.walk()):
            assert getattr(node, "hash", None) is None

    def test_verify_content_same_size_different_bytes(self, temp_dir):
        _write_tree(temp_dir / "l", {"a/x.txt": "abcd"})
        _write_tree(temp_dir / "r", {"a/x.txt": "wxyz"})
        left, right = scan(temp_dir / "l"), scan(temp_dir / "r")

        compare(left, right, CompareOptions(verify_content=True))

        for tree in (left, right):
            x = tree.child("a").child("x.txt")
            assert x.status is DiffStatus.MODIFIED
            assert x.hash is not None
            assert tree.child("a").contains_diff is True
            assert tree.contains_diff is True
        assert left.child("a").child("x.txt").hash != right.child("a").child("x.txt").hash

    def test_verify_content_identical_files(self, temp_dir):
        _write_tree(temp_dir / "l", {"x.txt": "same"})
        _write_tree(temp_dir / "r", {"x.txt": "same"})
        left, right = scan(temp_dir / "l"), scan(temp_dir / "r")

        compare(left, right, CompareOptions(verify_content=True))

        assert left.child("x.txt").status is DiffStatus.UNCHANGED
        assert left.child("x.txt").hash == right.child("x.txt").hash
        assert left.contains_diff is False

    def test_size_mismatch_skips_hashing(self, temp_dir):
        _write_tree(temp_dir / "l", {"x.txt": "short"})
        _write_tree(temp_dir / "r", {"x.txt": "much longer"})
        left, right = scan(temp_dir / "l"), scan(temp_dir / "r")

        with patch("folder_diff.comparator.compute_file_hash") as mock_hash:
            compare(left, right, CompareOptions(verify_content=True))

        mock_hash.assert_not_called()
        assert left.child("x.txt").status is DiffStatus.MODIFIED

    def test_hash_failure_never_equal(self):
        left = make_dir("/l", make_file("/l/x", size=4))
        right = make_dir("/r", make_file("/r/x", size=4))

        with patch("folder_diff.comparator.compute_file_hash", return_value=HASH_ERROR):
            compare(left, right, CompareOptions(verify_content=True))

        assert left.child("x").status is DiffStatus.MODIFIED
        assert right.child("x").status is DiffStatus.MODIFIED
        assert left.child("x").hash == HASH_ERROR
        assert left.contains_diff is True

    def test_one_sided_hash_failure(self):
        left = make_dir("/l", make_file("/l/x", size=4))
        right = make_dir("/r", make_file("/r/x", size=4))

        with patch(
            "folder_diff.comparator.compute_file_hash",
            side_effect=["abc", HASH_ERROR],
        ):
            compare(left, right, CompareOptions(verify_content=True))

        assert left.child("x").status is DiffStatus.MODIFIED

    def test_failed_entries_are_never_hashed(self):
        left_pipe = make_file("/l/pipe")
        left_pipe.mark(DiffStatus.FAILURE)
        left = make_dir("/l", left_pipe)
        right = make_dir("/r", make_file("/r/pipe"))

        with patch("folder_diff.comparator.compute_file_hash") as mock_hash:
            compare(left, right, CompareOptions(verify_content=True))

        mock_hash.assert_not_called()
        assert left.child("pipe").status is DiffStatus.FAILURE
        assert right.child("pipe").status is DiffStatus.UNCHANGED
        assert left.contains_diff is True
        assert right.contains_diff is True

    def test_type_change_is_modified(self):
        left = make_dir("/l", make_dir("/l/thing", make_file("/l/thing/inner", size=1)))
        right = make_dir("/r", make_file("/r/thing", size=1))

        compare(left, right)

        assert left.child("thing").status is DiffStatus.MODIFIED
        assert right.child("thing").status is DiffStatus.MODIFIED
        # Not treated as remove plus add
        assert left.child("thing").child("inner").status is DiffStatus.UNCHANGED
        assert left.contains_diff and right.contains_diff

    def test_removed_subtree(self, temp_dir):
        _write_tree(temp_dir / "l", {"keep.txt": "k", "b/one.txt": "1", "b/c/two.txt": "2"})
        _write_tree(temp_dir / "r", {"keep.txt": "k"})
        left, right = scan(temp_dir / "l"), scan(temp_dir / "r")

        compare(left, right)

        assert right.child("b") is None
        for node in left.child("b").walk():
            assert node.status is DiffStatus.REMOVED
            assert node.contains_diff is True
        assert left.contains_diff is True
        assert right.contains_diff is True

    def test_added_subtree(self):
        left = make_dir("/l")
        right = make_dir("/r", make_dir("/r/new", make_file("/r/new/f", size=2)))

        compare(left, right)

        for node in right.child("new").walk():
            assert node.status is DiffStatus.ADDED
        assert right.contains_diff and left.contains_diff

    def test_deep_difference_propagates_to_root(self, temp_dir):
        _write_tree(temp_dir / "l", {"a/b/c/d.txt": "1"})
        _write_tree(temp_dir / "r", {"a/b/c/d.txt": "22"})
        left, right = scan(temp_dir / "l"), scan(temp_dir / "r")

        compare(left, right)

        for tree in (left, right):
            assert tree.contains_diff
            assert tree.child("a").contains_diff
            assert tree.child("a").child("b").contains_diff
            assert tree.child("a").child("b").child("c").contains_diff
            assert tree.status is DiffStatus.UNCHANGED

    def test_non_directory_arguments_are_noop(self):
        left = make_file("/l", size=1)
        right = make_file("/r", size=2)

        compare(left, right)

        assert left.status is DiffStatus.UNCHANGED
        assert right.status is DiffStatus.UNCHANGED

    def test_idempotent(self, sample_folders):
        left_path, right_path = sample_folders
        left, right = scan(left_path), scan(right_path)
        options = CompareOptions(verify_content=True)

        compare(left, right, options)
        first = (_annotations(left), _annotations(right))
        compare(left, right, options)

        assert (_annotations(left), _annotations(right)) == first

    def test_root_contains_diff_iff_any_status(self, sample_folders):
        left_path, right_path = sample_folders
        left, right = scan(left_path), scan(right_path)

        compare(left, right, CompareOptions(verify_content=True))

        for tree in (left, right):
            any_status = any(n.status is not DiffStatus.UNCHANGED for n in tree.walk())
            assert tree.contains_diff == any_status


class TestSummarize:

    def test_counts(self, sample_folders):
        left_path, right_path = sample_folders
        left, right = scan(left_path), scan(right_path)
        compare(left, right, CompareOptions(verify_content=True))

        left_counts = summarize(left)
        right_counts = summarize(right)

        assert left_counts[DiffStatus.REMOVED] == 2
        assert left_counts[DiffStatus.MODIFIED] == 2
        assert right_counts[DiffStatus.ADDED] == 1
        assert right_counts[DiffStatus.MODIFIED] == 2

    def test_none(self):
        assert summarize(None) == {}
