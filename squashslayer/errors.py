"""
Exceptions raised while opening, querying and repacking images.
"""

from typing import Optional


class SquashfsError(Exception):
    """Base class for every squashslayer failure."""


class ExtractionError(SquashfsError):
    """unsquashfs could not extract the image into the staging directory."""


class ListingError(SquashfsError):
    """unsquashfs could not produce the long listing of the image."""


class ImageClosedError(SquashfsError):
    """The image handle was used after close()."""


class FragmentBuildError(SquashfsError):
    """mksquashfs failed to build a fragment image."""

    def __init__(self, message: str, returncode: Optional[int] = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr
