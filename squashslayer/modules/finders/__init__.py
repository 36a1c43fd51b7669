from .squashfs_entry import (
    SquashfsEntry,
    PermissionQuad,
    Ownership,
    FILE_TYPES,
    DEVICE_TYPES,
)
from .permissions import decode_permissions, decode_ownership
from .listing_parser import parse_listing, parse_listing_line, scan_listing, ListingScan
