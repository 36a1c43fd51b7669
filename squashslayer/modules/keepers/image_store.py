# image_store.py
# Entry store for one opened SquashFS image.
#
# Opening an image extracts it into a staging directory and parses its
# listing once. After that the entries are read-only; every operation on a
# handle runs under the handle's lock, so concurrent callers are served one
# at a time in arrival order. Separate images share nothing.

import os
import shutil
import tempfile
import threading
from pathlib import Path
from typing import Iterable, Optional

from squashslayer.config import STAGE_SUFFIX, FRAGMENT_SCRATCH_NAME, PSEUDOFILE_NAME
from squashslayer.errors import (
    ExtractionError,
    ListingError,
    ImageClosedError,
    FragmentBuildError,
)
from squashslayer.modules.finders.squashfs_entry import SquashfsEntry
from squashslayer.modules.finders.listing_parser import scan_listing
from squashslayer.modules.keepers.pseudofile import to_pseudofile, parent_paths
from squashslayer.modules.keepers.tools import SquashfsTools


class SquashfsImage:
    """
    Handle on an extracted SquashFS image and its parsed entries.

    Usage:
        image = SquashfsImage.open("rootfs.img")
        try:
            print(image.pseudofile())
            image.build_fragment(["etc/passwd"], "out/passwd.img")
        finally:
            image.close()  # removes the staging tree
    """

    def __init__(
        self,
        image_path: Path,
        entries: list[SquashfsEntry],
        stage_dir: Path,
        tools: SquashfsTools,
        skipped_lines: int = 0,
    ):
        self.image_path = image_path
        self.stage_dir = stage_dir
        self.tools = tools
        self.skipped_lines = skipped_lines
        self._entries = tuple(entries)
        self.entry_count = len(self._entries)
        self._by_path = {entry.path: entry for entry in self._entries}
        self._lock = threading.Lock()
        self._closed = False

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @classmethod
    def open(
        cls,
        image_path: str | Path,
        tools: Optional[SquashfsTools] = None,
        workdir: Optional[str | Path] = None,
        verbose: bool = False,
    ) -> "SquashfsImage":
        """
        Extract an image and parse its listing.

        Args:
            image_path: SquashFS image to open
            tools: Tool runner, defaults to the real squashfs-tools
            workdir: Parent of the staging directory (default: cwd). Each
                handle gets its own staging directory inside it.
            verbose: Print progress and skipped listing lines

        Raises:
            ExtractionError: unsquashfs failed to extract the image
            ListingError: unsquashfs failed to list the image
        """
        image_path = Path(image_path)
        tools = tools or SquashfsTools()
        workdir = Path(workdir) if workdir else Path(os.getcwd())
        workdir.mkdir(parents=True, exist_ok=True)
        stage_dir = Path(tempfile.mkdtemp(prefix=f"{image_path.stem}-", suffix=STAGE_SUFFIX, dir=workdir))

        if verbose:
            print(f"[*] Extracting {image_path} to {stage_dir}")
        result = tools.extract(image_path, stage_dir)
        if not result.ok:
            shutil.rmtree(stage_dir, ignore_errors=True)
            raise ExtractionError(
                f"unsquashfs failed to extract {image_path} (exit {result.returncode}): {result.stderr.strip()}"
            )

        listing = tools.list(image_path)
        if not listing.ok:
            shutil.rmtree(stage_dir, ignore_errors=True)
            raise ListingError(
                f"unsquashfs failed to list {image_path} (exit {listing.returncode}): {listing.stderr.strip()}"
            )

        scan = scan_listing(listing.stdout, verbose=verbose)
        if verbose:
            print(f"[+] Parsed {len(scan.entries)} entries ({scan.skipped_lines} lines skipped)")
        return cls(image_path, scan.entries, stage_dir, tools, scan.skipped_lines)

    def close(self) -> None:
        """Remove the staging tree. Further calls are no-ops."""
        with self._lock:
            if self._closed:
                return
            if self.stage_dir.exists():
                shutil.rmtree(self.stage_dir)
            self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _check_open(self) -> None:
        if self._closed:
            raise ImageClosedError(f"Image {self.image_path} is closed")

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def entries(self) -> tuple[SquashfsEntry, ...]:
        """All entries in listing order."""
        with self._lock:
            self._check_open()
            return self._entries

    def entry(self, path: str) -> Optional[SquashfsEntry]:
        """Look up a single entry by its image path."""
        with self._lock:
            self._check_open()
            return self._by_path.get(path)

    def files(self) -> list[str]:
        """Paths of every non-directory entry, in listing order."""
        with self._lock:
            self._check_open()
            return [entry.path for entry in self._entries if not entry.is_dir]

    def pseudofile(self) -> str:
        """Pseudo file covering every entry of the image."""
        with self._lock:
            self._check_open()
            return to_pseudofile(self._entries)

    def pseudofile_fragment(self, paths: Iterable[str], with_parents: bool = False) -> str:
        """Pseudo file restricted to the given paths."""
        with self._lock:
            self._check_open()
            return to_pseudofile(self._select(paths, with_parents))

    def _select(self, paths: Iterable[str], with_parents: bool) -> list[SquashfsEntry]:
        wanted = set(paths)
        if with_parents:
            for path in list(wanted):
                wanted.update(parent_paths(path))
        return [entry for entry in self._entries if entry.path in wanted]

    # =========================================================================
    # Fragment Build
    # =========================================================================

    def build_fragment(
        self,
        paths: Iterable[str],
        output_path: str | Path,
        with_parents: bool = False,
        verbose: bool = False,
    ) -> Path:
        """
        Repack the given paths into a new image at output_path.

        Only entries named in `paths` are copied from the staging tree.
        Directories are created empty, symlinks are recreated as links and
        device nodes are left to their pseudo file directive. The pseudo file
        is kept next to the output; the scratch tree is always removed.
        An existing scratch directory is never reused or removed.

        Raises:
            FragmentBuildError: scratch directory already exists, staging
                failed or mksquashfs failed
        """
        with self._lock:
            self._check_open()
            output_path = Path(output_path)
            base_dir = output_path.parent
            scratch_dir = base_dir / FRAGMENT_SCRATCH_NAME
            pseudofile_path = base_dir / PSEUDOFILE_NAME

            fragment = self._select(paths, with_parents)
            base_dir.mkdir(parents=True, exist_ok=True)
            try:
                scratch_dir.mkdir()
            except FileExistsError as e:
                raise FragmentBuildError(f"Scratch directory {scratch_dir} already exists") from e

            try:
                pseudofile_path.write_text(to_pseudofile(fragment) + "\n")
                self._stage_fragment(fragment, scratch_dir)
                if verbose:
                    print(f"[*] Packing {len(fragment)} entries into {output_path}")
                result = self.tools.repack(scratch_dir, output_path, pseudofile_path)
            finally:
                shutil.rmtree(scratch_dir, ignore_errors=True)

            if not result.ok:
                raise FragmentBuildError(
                    f"mksquashfs failed to build {output_path} (exit {result.returncode})",
                    returncode=result.returncode,
                    stderr=result.stderr,
                )
            if verbose:
                print(f"[+] Built fragment {output_path}")
            return output_path

    def _stage_fragment(self, fragment: list[SquashfsEntry], scratch_dir: Path) -> None:
        """Copy the fragment's entries from the staging tree into scratch_dir."""
        for entry in fragment:
            if entry.is_device:
                continue
            dest = scratch_dir / entry.path
            if entry.is_dir:
                dest.mkdir(parents=True, exist_ok=True)
                continue
            src = self.stage_dir / entry.path
            try:
                dest.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(src, dest, follow_symlinks=False)
            except OSError as e:
                raise FragmentBuildError(f"Could not stage {entry.path}: {e}") from e
