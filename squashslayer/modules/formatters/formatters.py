#========= FORMATTER
from squashslayer.modules.finders.squashfs_entry import PermissionQuad, SquashfsEntry


def encode_permissions(quad: PermissionQuad) -> str:
    """
    Convert a permission quad back to a 9-character ls-style string.

    Examples:
        (0, 7, 5, 5) -> 'rwxr-xr-x'
        (5, 7, 5, 5) -> 'rwsr-xr-t'
        (4, 6, 4, 4) -> 'rwSr--r--'
    """
    perms = ''
    # owner, group, other with their special-bit weight and letter
    for bits, weight, letter in ((quad.owner, 4, 's'), (quad.group, 2, 's'), (quad.other, 1, 't')):
        perms += 'r' if bits & 4 else '-'
        perms += 'w' if bits & 2 else '-'
        if quad.sticky & weight:
            perms += letter if bits & 1 else letter.upper()
        else:
            perms += 'x' if bits & 1 else '-'
    return perms


#----- Listing format entry
def format_entry_line(entry: SquashfsEntry) -> str:
    """
    Format an entry for display, similar to ls -la output.

        drwxr-xr-x  root/root         -  etc/
        crw-rw-rw-  root/root      1, 3  dev/null
    """
    mode = entry.type + encode_permissions(entry.permissions)
    owner = f"{entry.ownership.owner}/{entry.ownership.group}"
    device = f"{entry.device[0]}, {entry.device[1]}" if entry.device else "-"
    name = entry.path or "/"
    if entry.is_dir and entry.path:
        name += "/"
    return f"  {mode}  {owner:<16} {device:>8}  {name}"
