# squashfs_entry.py
# One filesystem object as reported by `unsquashfs -ll`.

from dataclasses import dataclass
from typing import NamedTuple, Optional


# Type characters from the first column of the listing
REGULAR_FILE = "-"
DIRECTORY = "d"
SYMLINK = "l"
CHAR_DEVICE = "c"
BLOCK_DEVICE = "b"

FILE_TYPES = (CHAR_DEVICE, BLOCK_DEVICE, SYMLINK, DIRECTORY, REGULAR_FILE)
DEVICE_TYPES = (CHAR_DEVICE, BLOCK_DEVICE)


class PermissionQuad(NamedTuple):
    """Special bits plus the three standard octal digits, each 0-7."""
    sticky: int
    owner: int
    group: int
    other: int

    def digits(self) -> str:
        """Four-digit mode string as written in a pseudofile, e.g. '0755'."""
        return f"{self.sticky}{self.owner}{self.group}{self.other}"


class Ownership(NamedTuple):
    owner: str
    group: str


@dataclass(frozen=True)
class SquashfsEntry:
    """A single image entry (file, directory, symlink or device node)."""
    type: str                           # One of FILE_TYPES
    path: str                           # Relative to the image root, "" for the root itself
    permissions: PermissionQuad
    ownership: Ownership
    device: Optional[tuple[int, int]] = None    # (major, minor), device types only

    @property
    def is_dir(self) -> bool:
        return self.type == DIRECTORY

    @property
    def is_symlink(self) -> bool:
        return self.type == SYMLINK

    @property
    def is_device(self) -> bool:
        return self.type in DEVICE_TYPES

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": self.type,
            "path": self.path,
            "permissions": self.permissions.digits(),
            "owner": self.ownership.owner,
            "group": self.ownership.group,
            "device": list(self.device) if self.device else None,
        }
