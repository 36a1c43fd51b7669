# config.py
# Tool locations and fixed names used when unpacking and repacking images.

import os


# =============================================================================
# External Tools
# =============================================================================

UNSQUASHFS_BIN = os.environ.get("SQUASHSLAYER_UNSQUASHFS", "unsquashfs")
MKSQUASHFS_BIN = os.environ.get("SQUASHSLAYER_MKSQUASHFS", "mksquashfs")

# Flags appended to every mksquashfs fragment build
MKSQUASHFS_OPTIONS = ["-noappend", "-no-recovery", "-no-progress"]


# =============================================================================
# Staging Layout
# =============================================================================

# Prefix unsquashfs puts in front of every path in its -ll listing
LISTING_ROOT_MARKER = "squashfs-root"

# Each handle extracts into a fresh <workdir>/<image stem>-XXXX<STAGE_SUFFIX>
STAGE_SUFFIX = "-squashfs-root"

# Fragment builds write these next to the output image
FRAGMENT_SCRATCH_NAME = "tmp"
PSEUDOFILE_NAME = "pseudofile"


# =============================================================================
# API Server
# =============================================================================

# Parent directory for staging trees of images opened through the API
API_WORKDIR = os.environ.get("SQUASHSLAYER_WORKDIR") or None
