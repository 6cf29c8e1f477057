"""Resource directory aggregation."""

from .copy import DEFAULT_EXCLUDES, copy_tree, ensure_directory
from .overlay import OverlayResolver

__all__ = ["DEFAULT_EXCLUDES", "OverlayResolver", "copy_tree", "ensure_directory"]
