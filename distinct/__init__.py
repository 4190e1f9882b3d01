"""First-seen-wins deduplication of listing rows."""

__version__ = "0.1.0"
