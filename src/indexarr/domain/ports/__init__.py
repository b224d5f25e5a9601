from .browser import BrowserPort, FormPort, FormValues
from .definition_loader import DefinitionLoaderPort
from .indexer import IndexerPort
from .site_config import SiteConfigPort

__all__ = [
    "BrowserPort",
    "DefinitionLoaderPort",
    "FormPort",
    "FormValues",
    "IndexerPort",
    "SiteConfigPort",
]
