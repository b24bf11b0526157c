"""Helpers to load, validate and persist configuration and template files."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from dotenv import dotenv_values

from rrdsink.errors import SchemaLoadError

from .schema import RRDTemplate, WriterSettings

DEFAULT_SETTINGS_PATH = Path("storage.yaml")

# Elementos repetibles del formato <rrd_def> heredado.
_XML_LIST_TAGS = {"datasource", "archive"}


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(path)
    with path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping at {path}, found {type(data).__name__}")
    return data


def _write_yaml(path: Path, payload: Mapping[str, Any]):
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        yaml.safe_dump(payload, fh, sort_keys=False, allow_unicode=True)


def _element_to_mapping(element: ET.Element) -> Dict[str, Any]:
    payload: Dict[str, Any] = {}
    for child in element:
        if child.tag in _XML_LIST_TAGS:
            items: List[Dict[str, Any]] = payload.setdefault(child.tag, [])
            items.append(_element_to_mapping(child))
        else:
            payload[child.tag] = (child.text or "").strip()
    return payload


def _read_xml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(path)
    root = ET.parse(path).getroot()
    if root.tag != "rrd_def":
        raise ValueError(f"Expected <rrd_def> at {path}, found <{root.tag}>")
    return _element_to_mapping(root)


def load_template(path: Path) -> RRDTemplate:
    """Read and validate an RRD template (YAML, or the legacy ``<rrd_def>`` XML)."""

    template_path = Path(path)
    try:
        if template_path.suffix.lower() == ".xml":
            raw = _read_xml(template_path)
        else:
            raw = _read_yaml(template_path)
        return RRDTemplate.from_mapping(raw)
    except FileNotFoundError as exc:
        raise SchemaLoadError(f"Template file not found: {template_path}") from exc
    except (OSError, yaml.YAMLError, ET.ParseError) as exc:
        raise SchemaLoadError(f"Unable to parse template {template_path}: {exc}") from exc
    except ValueError as exc:
        raise SchemaLoadError(f"Invalid template {template_path}: {exc}") from exc


def save_template(template: RRDTemplate, path: Path):
    """Persist a template using the YAML layout."""

    _write_yaml(Path(path), template.to_dict())


def load_writer_settings(path: Optional[Path] = None) -> WriterSettings:
    """Read and validate writer settings from storage.yaml."""

    cfg_path = path or DEFAULT_SETTINGS_PATH
    raw = _read_yaml(cfg_path)
    return WriterSettings.from_mapping(raw)


def save_writer_settings(settings: WriterSettings, path: Optional[Path] = None):
    """Persist the writer settings to storage.yaml."""

    cfg_path = path or DEFAULT_SETTINGS_PATH
    _write_yaml(cfg_path, settings.to_dict())


def writer_settings_from_env(env: Mapping[str, Any]) -> WriterSettings:
    """Create settings for a single output from environment variables."""

    output_payload = {
        "output_file": env.get("RRDTOOL_OUTPUT_FILE"),
        "template_file": env.get("RRDTOOL_TEMPLATE_FILE"),
        "binary_path": env.get("RRDTOOL_BINARY_PATH", "/usr/bin"),
        "type_names": env.get("RRDTOOL_TYPE_NAMES"),
        "generate": env.get("RRDTOOL_GENERATE"),
        "timeout_s": env.get("RRDTOOL_TIMEOUT_S"),
    }
    payload: Dict[str, Any] = {"outputs": [output_payload]}
    interval = env.get("RRDTOOL_METRICS_LOG_INTERVAL_S")
    if interval not in (None, ""):
        payload["metrics_log_interval_s"] = interval
    return WriterSettings.from_mapping(payload)


def load_env_file(path: Path) -> Mapping[str, str]:
    """Load key/value pairs from a dotenv file."""

    values = dotenv_values(str(path))
    return {k: v for k, v in values.items() if v is not None}
