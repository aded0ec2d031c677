# catalog-it Sources Module
# Remote catalogs the engine can mirror

from catalog_it.sources.base import CatalogSource
from catalog_it.sources.socrata import SocrataSource

__all__ = [
    "CatalogSource",
    "SocrataSource",
]
