# squashslayer.py

import json

from squashslayer.modules.formatters import format_entry_line
from squashslayer.modules.keepers.image_store import SquashfsImage


# split output to file and stdout
class Tee:
    """Duplicate stdout/stderr to a file and the console."""
    def __init__(self, *files):
        self.files = files
    def write(self, data):
        for f in self.files:
            f.write(data)
    def flush(self):
        for f in self.files:
            f.flush()


# --- image listing
def display_listing(image: SquashfsImage, verbose: bool = False):
    """
    Print every entry of an opened image ls -la style.

    Args:
        image: Opened SquashfsImage
        verbose: Also print entry counts
    """
    entries = image.entries
    if verbose:
        dirs = sum(1 for e in entries if e.is_dir)
        devices = sum(1 for e in entries if e.is_device)
        print(f"\n  [Stats] Entries: {len(entries)} ({dirs} dirs, {devices} devices)")
        print(f"  [Stats] Listing lines skipped: {image.skipped_lines}")

    print(f"\n  {image.image_path} contents:\n")
    for entry in entries:
        print(format_entry_line(entry))


def dump_entries_json(image: SquashfsImage) -> str:
    """Serialize every entry of an image to a JSON array."""
    return json.dumps([e.to_dict() for e in image.entries], indent=2)
