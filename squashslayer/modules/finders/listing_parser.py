# listing_parser.py
# Parser for the long listing printed by `unsquashfs -n -ll <image>`
#
# Each listing line is fixed-field, left to right:
#
#   drwxr-xr-x root/root                45 2021-03-10 10:31 squashfs-root/etc
#   crw-rw-rw- root/root             1,  3 2021-03-10 10:31 squashfs-root/dev/null
#   lrwxrwxrwx root/root                 7 2021-03-10 10:31 squashfs-root/bin -> usr/bin
#
# A line either matches the whole grammar or is dropped. Banner lines such as
# "Parallel unsquashfs: Using 4 processors" fall out the same way.

from dataclasses import dataclass, field
from typing import Optional

from squashslayer.config import LISTING_ROOT_MARKER
from squashslayer.modules.finders.squashfs_entry import (
    SquashfsEntry,
    FILE_TYPES,
    DEVICE_TYPES,
    SYMLINK,
)
from squashslayer.modules.finders.permissions import decode_permissions, decode_ownership


TIMESTAMP_WIDTH = 16    # "YYYY-MM-DD HH:MM"
SYMLINK_ARROW = " -> "


@dataclass
class ListingScan:
    """Result of parsing a complete listing."""
    entries: list[SquashfsEntry] = field(default_factory=list)
    skipped_lines: int = 0      # Non-blank lines that did not match the grammar


def _split_field(text: str, sep: str) -> tuple[str, str]:
    """Split off the leading field at the first `sep`; ValueError if absent."""
    head, found, tail = text.partition(sep)
    if not found:
        raise ValueError(f"Missing {sep!r} separator in {text!r}")
    return head, tail


def _parse_line(line: str, root_marker: str) -> SquashfsEntry:
    """Parse one listing line, raising ValueError on any grammar mismatch."""
    if len(line) < 11:
        raise ValueError("Line too short")

    type_char = line[0]
    if type_char not in FILE_TYPES:
        raise ValueError(f"Unknown type character {type_char!r}")

    permissions = decode_permissions(line[1:10])

    # line[10] is the column separator
    own_text, tail = _split_field(line[11:], " ")
    ownership = decode_ownership(own_text)
    tail = tail.strip()

    device = None
    if type_char in DEVICE_TYPES:
        major, tail = _split_field(tail, ",")
        minor, tail = _split_field(tail.strip(), " ")
        device = (int(major), int(minor))
    else:
        _size, tail = _split_field(tail, " ")

    if len(tail) < TIMESTAMP_WIDTH:
        raise ValueError("Missing modification time")
    tail = tail[TIMESTAMP_WIDTH:].strip()

    if not tail.startswith(root_marker):
        raise ValueError(f"Path does not start with {root_marker!r}")
    path = tail[len(root_marker):]

    if type_char == SYMLINK:
        path, _target = _split_field(path, SYMLINK_ARROW)
        path = path.rstrip()

    if path and not path.startswith("/"):
        raise ValueError(f"Path does not start with {root_marker!r}/")

    return SquashfsEntry(
        type=type_char,
        path=path[1:],
        permissions=permissions,
        ownership=ownership,
        device=device,
    )


def parse_listing_line(line: str, root_marker: str = LISTING_ROOT_MARKER) -> Optional[SquashfsEntry]:
    """
    Parse a single listing line.

    Returns the entry, or None if the line is empty or malformed.
    """
    line = line.rstrip("\r")
    if not line:
        return None
    try:
        return _parse_line(line, root_marker)
    except ValueError:
        return None


def scan_listing(text: str, root_marker: str = LISTING_ROOT_MARKER, verbose: bool = False) -> ListingScan:
    """
    Parse the full listing text, keeping entries in listing order.

    Args:
        text: Complete stdout of `unsquashfs -n -ll`
        root_marker: Extraction-root prefix present on every path
        verbose: Print each skipped non-blank line

    Returns:
        ListingScan with the entries and the count of skipped lines
    """
    scan = ListingScan()
    for line in text.split("\n"):
        entry = parse_listing_line(line, root_marker)
        if entry is not None:
            scan.entries.append(entry)
        elif line.strip():
            scan.skipped_lines += 1
            if verbose:
                print(f"  [!] Skipped listing line: {line.strip()}")
    return scan


def parse_listing(text: str, root_marker: str = LISTING_ROOT_MARKER) -> list[SquashfsEntry]:
    """Parse the full listing text into entries, silently dropping bad lines."""
    return scan_listing(text, root_marker).entries
