"""Site configuration adapter: SitesConfig rows and local JSON files."""

from __future__ import annotations

from .loader import LoadedConfigs, import_into_store, load_from_file, load_from_store
from .translator import dump_site_row, parse_site_row

__all__ = [
    "LoadedConfigs",
    "dump_site_row",
    "import_into_store",
    "load_from_file",
    "load_from_store",
    "parse_site_row",
]
