"""Configuration schemas and persistence helpers for the RRD writer."""

from .schema import (
    ArchiveDefinition,
    DataSourceDefinition,
    RRDTemplate,
    RRDToolSettings,
    WriterSettings,
)
from .store import (
    load_env_file,
    load_template,
    load_writer_settings,
    save_template,
    save_writer_settings,
    writer_settings_from_env,
)

__all__ = [
    "ArchiveDefinition",
    "DataSourceDefinition",
    "RRDTemplate",
    "RRDToolSettings",
    "WriterSettings",
    "load_env_file",
    "load_template",
    "load_writer_settings",
    "save_template",
    "save_writer_settings",
    "writer_settings_from_env",
]
