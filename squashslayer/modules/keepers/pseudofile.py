# pseudofile.py
# Serialize entries into an mksquashfs pseudo file (-pf).
#
# Device entries become device directives that create the node:
#     dev/null c 0666 root root 1 3
# Everything else becomes a metadata override on the copied path:
#     etc m 0755 root root

from typing import Iterable

from squashslayer.modules.finders.squashfs_entry import SquashfsEntry


METADATA_DIRECTIVE = "m"


def entry_to_directive(entry: SquashfsEntry) -> str:
    """Render one entry as a single pseudo file line."""
    owner, group = entry.ownership
    mode = entry.permissions.digits()
    if entry.is_device:
        major, minor = entry.device
        return f"{entry.path} {entry.type} {mode} {owner} {group} {major} {minor}"
    path = entry.path or "/"
    return f"{path} {METADATA_DIRECTIVE} {mode} {owner} {group}"


def to_pseudofile(entries: Iterable[SquashfsEntry]) -> str:
    """
    Build pseudo file text for the given entries.

    Lines come out in the reverse of the order the entries are given, one
    directive per entry, newline separated with no trailing newline.
    """
    lines = [entry_to_directive(entry) for entry in entries]
    lines.reverse()
    return "\n".join(lines)


def parent_paths(path: str) -> list[str]:
    """
    Ancestor directory paths of an image path, root first.

        'a/b/c' -> ['', 'a', 'a/b']
        'a'     -> ['']
        ''      -> []
    """
    if not path:
        return []
    parts = path.split("/")[:-1]
    return [""] + ["/".join(parts[:i]) for i in range(1, len(parts) + 1)]
