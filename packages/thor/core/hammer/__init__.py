"""Transform OTU tables into colour sketch images."""

from thor.core.hammer.render import render_table
from thor.core.hammer.table import Otu, OtuTable, TableState, genus_from_lineage

__all__ = [
    "Otu",
    "OtuTable",
    "TableState",
    "genus_from_lineage",
    "render_table",
]
