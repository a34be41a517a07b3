"""
Command line access to the stored profile and saved connections.
"""

import argparse
import sys
from pathlib import Path

# Add repository root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from profilebook.core.config import get_store, validate_config
from profilebook.core.connections import ConnectionLedger
from profilebook.core.errors import ProfileNotFound
from profilebook.core.profile_store import ProfileStore, identity_of
from profilebook.core.workflow import IMAGES_FIELD, ProfileEditor


def _editor() -> ProfileEditor:
    store = get_store()
    editor = ProfileEditor(ProfileStore(store), ConnectionLedger(store))
    editor.load()
    return editor


def show_command(args) -> int:
    """Print the stored profile as label/value rows."""
    editor = _editor()
    try:
        rows = editor.view_rows()
    except ProfileNotFound:
        print("No Profile Found")
        return 1

    width = max((len(row.label) for row in rows), default=0)
    for row in rows:
        print(f"{row.label.ljust(width)}  {row.value}")
    if args.images:
        print(f"Images: {len(editor.display.get(IMAGES_FIELD) or [])}")
    return 0


def connections_command(args) -> int:
    """List saved connections in insertion order."""
    ledger = ConnectionLedger(get_store())
    entries = ledger.list()
    if not entries:
        print("No saved connections")
        return 0

    for position, entry in enumerate(entries, start=1):
        name = " ".join(str(entry.get(k, "")) for k in ("firstName", "lastName")).strip()
        print(f"{position}. {name or '(unnamed)'} <{identity_of(entry) or 'no email'}>")
    return 0


def delete_command(args) -> int:
    """Delete the stored profile and its saved connections."""
    if not args.force:
        response = input("Are you sure you want to delete your profile? (yes/no): ").strip().lower()
        if response != "yes":
            print("Delete cancelled.")
            return 0

    removed = _editor().delete()
    print(f"Profile deleted ({removed} saved connections removed)")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Profilebook profile utilities")
    subparsers = parser.add_subparsers(dest="command", required=True)

    show = subparsers.add_parser("show", help="Show the stored profile")
    show.add_argument("--images", action="store_true", help="Also print the number of stored images")
    show.set_defaults(func=show_command)

    connections = subparsers.add_parser("connections", help="List saved connections")
    connections.set_defaults(func=connections_command)

    delete = subparsers.add_parser("delete", help="Delete the stored profile")
    delete.add_argument("--force", action="store_true", help="Skip the confirmation prompt")
    delete.set_defaults(func=delete_command)

    args = parser.parse_args(argv)

    issues = validate_config()
    if issues:
        for issue in issues:
            print(f"❌ ERROR: {issue}")
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
