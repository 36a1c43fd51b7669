from .formatters import encode_permissions, format_entry_line
