"""Command-line interface for folder diff."""

import argparse
import json
import logging
import sys
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from tqdm import tqdm

from .comparator import summarize
from .db import SyncJournal
from .hasher import ALGORITHMS
from .models import CompareOptions, DiffStatus, Node, ScanOptions, Side
from .session import CompareSession
from .sync import ProgressChannel, SyncCancelled, calculate_totals, delete_item

STATUS_MARKERS = {
    DiffStatus.UNCHANGED: " ",
    DiffStatus.ADDED: "+",
    DiffStatus.REMOVED: "-",
    DiffStatus.MODIFIED: "~",
    DiffStatus.FAILURE: "!",
}


def format_size(size: int) -> str:
    """Format file size in human-readable form."""
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"


def _add_scan_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--hidden", action="store_true", help="Include entries starting with '.'")
    parser.add_argument("--system", action="store_true", help="Include platform artifacts like .DS_Store")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="folder-diff",
        description="Compare two folders and sync entries between them.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s compare /path/to/left /path/to/right --verify --diff-only
  %(prog)s sync left right docs/report.txt --from left
  %(prog)s delete right docs/old
        """
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    compare_cmd = commands.add_parser("compare", help="Show the differences between two folders")
    compare_cmd.add_argument("left", type=Path, help="Left (before) folder")
    compare_cmd.add_argument("right", type=Path, help="Right (after) folder")
    _add_scan_flags(compare_cmd)
    compare_cmd.add_argument("--verify", action="store_true",
                             help="Hash same-size files to confirm identical content")
    compare_cmd.add_argument("--algorithm", choices=ALGORITHMS, default="sha256",
                             help="Hash algorithm used by --verify (default: sha256)")
    compare_cmd.add_argument("--view", choices=["left", "right", "unified"], default="unified",
                             help="Which tree to print (default: unified)")
    compare_cmd.add_argument("--diff-only", action="store_true",
                             help="Only print entries that differ")
    compare_cmd.add_argument("--json", action="store_true", help="Print the tree as JSON")

    sync_cmd = commands.add_parser("sync", help="Copy an entry to the other folder")
    sync_cmd.add_argument("left", type=Path, help="Left folder")
    sync_cmd.add_argument("right", type=Path, help="Right folder")
    sync_cmd.add_argument("path", help="Entry to copy, relative to the source folder")
    sync_cmd.add_argument("--from", dest="source", choices=["left", "right"], default="left",
                          help="Folder to copy from (default: left)")
    sync_cmd.add_argument("--journal", "-j", type=Path,
                          help="SQLite journal used to resume an interrupted sync")
    _add_scan_flags(sync_cmd)

    delete_cmd = commands.add_parser("delete", help="Delete an entry inside a folder")
    delete_cmd.add_argument("root", type=Path, help="Folder containing the entry")
    delete_cmd.add_argument("path", help="Entry to delete, relative to the folder")
    delete_cmd.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")

    return parser


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)


def validate_folders(*folders: Path) -> None:
    """Exit with an error unless every folder is an existing directory."""
    for folder in folders:
        if not folder.exists():
            print(f"Error: Folder does not exist: {folder}")
            sys.exit(1)
        if not folder.is_dir():
            print(f"Error: Not a directory: {folder}")
            sys.exit(1)


def render_tree(node: Node, diff_only: bool = False, depth: int = 0) -> list[str]:
    """Render a tree as indented lines with a status marker per entry."""
    if diff_only and depth > 0 and not node.contains_diff and node.status is DiffStatus.UNCHANGED:
        return []
    suffix = "/" if node.is_directory else ""
    lines = [
        f"{STATUS_MARKERS[node.status]} {'  ' * depth}{node.name}{suffix} ({format_size(node.size)})"
    ]
    for child in getattr(node, "children", []):
        lines.extend(render_tree(child, diff_only, depth + 1))
    return lines


def confirm(prompt: str) -> bool:
    response = input(f"{prompt} (y/N): ").strip().lower()
    return response == 'y'


def run_compare(args: argparse.Namespace) -> None:
    validate_folders(args.left, args.right)
    session = CompareSession(
        args.left,
        args.right,
        ScanOptions(include_hidden=args.hidden, include_system=args.system),
        CompareOptions(verify_content=args.verify, algorithm=args.algorithm),
    )
    session.refresh()

    tree = {"left": session.left, "right": session.right, "unified": session.unified}[args.view]
    if args.json:
        print(json.dumps(tree.to_dict(), indent=2))
        return

    for line in render_tree(tree, diff_only=args.diff_only):
        print(line)

    left_counts = summarize(session.left)
    right_counts = summarize(session.right)
    unreadable = left_counts[DiffStatus.FAILURE] + right_counts[DiffStatus.FAILURE]
    print("\n--- Summary ---")
    print(f"Added:     {right_counts[DiffStatus.ADDED]}")
    print(f"Removed:   {left_counts[DiffStatus.REMOVED]}")
    print(f"Modified:  {right_counts[DiffStatus.MODIFIED]}")
    if unreadable:
        print(f"Unreadable: {unreadable}")
    print(f"Identical: {'no' if session.unified.contains_diff else 'yes'}")


def run_sync(args: argparse.Namespace) -> None:
    validate_folders(args.left, args.right)
    side = Side(args.source)
    session = CompareSession(
        args.left,
        args.right,
        ScanOptions(include_hidden=args.hidden, include_system=args.system),
    )
    session.refresh()

    source_path = session.root_for(side) / args.path
    node = session.tree_for(side).find(source_path)
    if node is None:
        print(f"Error: Not found in {side.value} folder: {args.path}")
        sys.exit(1)

    total_bytes, total_files = calculate_totals(node)
    destination = session.destination_for(node, side)
    print(f"Copying {source_path} -> {destination}")
    print(f"{total_files} files, {format_size(total_bytes)}")

    journal = SyncJournal(args.journal) if args.journal else None
    channel = ProgressChannel()
    stop = threading.Event()

    def worker():
        try:
            return session.copy_node(node, side, channel, journal, stop)
        finally:
            channel.close()

    try:
        with ThreadPoolExecutor(max_workers=1) as pool:
            future = pool.submit(worker)
            try:
                with tqdm(total=total_bytes, desc="Copying", unit="B", unit_scale=True) as pbar:
                    for event in channel.events():
                        pbar.update(event.bytes_copied)
                        pbar.set_postfix_str(event.name)
            except KeyboardInterrupt:
                # The worker stops before its next file; leaving the pool waits for it.
                stop.set()
            progress = future.result()
    except (SyncCancelled, OSError) as e:
        if isinstance(e, SyncCancelled):
            print("\n\nInterrupted!")
        else:
            print(f"Error: {e}")
        if journal is not None:
            journal.close()
            print(f"Completed copies are recorded in {args.journal}.")
            print("To resume, run the same command again.")
        sys.exit(1)

    if stop.is_set():
        print("\nInterrupted, but the copy had already finished.")
    if journal is not None:
        journal.clear()
    print(f"Copied {progress.files_copied} files ({format_size(progress.bytes_copied)}).")


def run_delete(args: argparse.Namespace) -> None:
    validate_folders(args.root)
    target = args.root.absolute() / args.path
    if not target.exists() and not target.is_symlink():
        print(f"Error: Not found: {target}")
        sys.exit(1)
    if not args.yes and not confirm(f"Delete {target}?"):
        print("Aborted.")
        sys.exit(0)

    try:
        delete_item(target)
    except OSError as e:
        print(f"Error: {e}")
        sys.exit(1)
    print(f"Deleted {target}")


COMMANDS = {
    "compare": run_compare,
    "sync": run_sync,
    "delete": run_delete,
}


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    COMMANDS[args.command](args)
