# catalog-it Output Module
# Rich console output

from catalog_it.output.console import Console

__all__ = [
    "Console",
]
