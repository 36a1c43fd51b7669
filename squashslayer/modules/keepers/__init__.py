from .tools import SquashfsTools, ToolResult
from .pseudofile import to_pseudofile, entry_to_directive, parent_paths
from .image_store import SquashfsImage
