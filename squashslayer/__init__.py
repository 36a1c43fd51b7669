"""squashslayer - introspect SquashFS images and repack fragments of them."""

__version__ = "0.1.0"
