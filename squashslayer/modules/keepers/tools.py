# tools.py
# Thin wrappers around the squashfs-tools executables.
#
# Every call is one-shot: no retries, no timeout. The caller decides what a
# non-zero exit means.

import subprocess
from dataclasses import dataclass
from pathlib import Path

from squashslayer.config import UNSQUASHFS_BIN, MKSQUASHFS_BIN, MKSQUASHFS_OPTIONS


@dataclass
class ToolResult:
    """Outcome of a single external tool invocation."""
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class SquashfsTools:
    """
    Runs unsquashfs and mksquashfs.

    Usage:
        tools = SquashfsTools()
        result = tools.extract("rootfs.img", "work/rootfs-squashfs-root")
        listing = tools.list("rootfs.img").stdout
    """

    def __init__(self, unsquashfs: str = UNSQUASHFS_BIN, mksquashfs: str = MKSQUASHFS_BIN):
        self.unsquashfs = unsquashfs
        self.mksquashfs = mksquashfs

    def _run(self, cmd: list[str]) -> ToolResult:
        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except FileNotFoundError as e:
            # Report a missing binary the same way as a failed run
            return ToolResult(returncode=127, stderr=str(e))
        return ToolResult(result.returncode, result.stdout, result.stderr)

    def extract(self, image_path: str | Path, stage_dir: str | Path) -> ToolResult:
        """Unpack the whole image into stage_dir."""
        return self._run([self.unsquashfs, "-f", "-d", str(stage_dir), str(image_path)])

    def list(self, image_path: str | Path) -> ToolResult:
        """Produce the long listing parsed by listing_parser."""
        return self._run([self.unsquashfs, "-n", "-ll", str(image_path)])

    def repack(self, scratch_dir: str | Path, output_path: str | Path, pseudofile_path: str | Path) -> ToolResult:
        """Pack scratch_dir into output_path, applying the pseudo file."""
        cmd = [
            self.mksquashfs,
            str(scratch_dir),
            str(output_path),
            "-pf", str(pseudofile_path),
            *MKSQUASHFS_OPTIONS,
        ]
        return self._run(cmd)
