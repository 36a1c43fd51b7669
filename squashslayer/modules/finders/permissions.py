# permissions.py
# Decoders for the permission and ownership columns of `unsquashfs -ll`.

from squashslayer.modules.finders.squashfs_entry import PermissionQuad, Ownership


# Allowed characters for each position of an rwx triad
READ_CHARS = {"r": 4, "-": 0}
WRITE_CHARS = {"w": 2, "-": 0}
EXEC_CHARS = {"x": 1, "-": 0, "s": 1, "t": 1, "S": 0, "T": 0}

# Characters in the execute slot that mark setuid/setgid/sticky
SPECIAL_CHARS = ("s", "t", "S", "T")

# Weight each triad adds to the special-bits digit: owner, group, other
SPECIAL_WEIGHTS = (4, 2, 1)


def _decode_triad(triad: str) -> tuple[int, bool]:
    """
    Decode one 3-character rwx group.

    Returns (octal_value, has_special_bit). Raises ValueError for a
    character that is not valid in its position.
    """
    r, w, x = triad
    if r not in READ_CHARS or w not in WRITE_CHARS or x not in EXEC_CHARS:
        raise ValueError(f"Invalid permission triad: {triad!r}")
    return READ_CHARS[r] + WRITE_CHARS[w] + EXEC_CHARS[x], x in SPECIAL_CHARS


def decode_permissions(text: str) -> PermissionQuad:
    """
    Convert a 9-character ls-style permission string to a numeric quad.

    Examples:
        'rwxr-xr--' -> (0, 7, 5, 4)
        'rwsr-xr-t' -> (5, 7, 5, 5)
        'rwSr--r--' -> (4, 6, 4, 4)

    Lower-case s/t carry both the execute bit and the special bit, upper-case
    S/T carry only the special bit.
    """
    if len(text) != 9:
        raise ValueError(f"Permission string must be 9 characters: {text!r}")

    sticky = 0
    octal = []
    for index, weight in enumerate(SPECIAL_WEIGHTS):
        value, special = _decode_triad(text[index * 3:index * 3 + 3])
        octal.append(value)
        if special:
            sticky += weight

    return PermissionQuad(sticky, *octal)


def decode_ownership(text: str) -> Ownership:
    """Split an 'owner/group' column on the first slash, no further checks."""
    owner, sep, group = text.partition("/")
    if not sep:
        raise ValueError(f"Ownership must be owner/group: {text!r}")
    return Ownership(owner, group)
