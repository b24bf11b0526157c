"""Typed configuration models implemented with dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence


def _as_str(value: Any, field_name: str, *, optional: bool = False) -> Optional[str]:
    if value is None:
        if optional:
            return None
        raise ValueError(f"'{field_name}' es obligatorio")
    text = str(value).strip()
    if not text and not optional:
        raise ValueError(f"'{field_name}' no puede estar vacío")
    return text or None


def _as_int(value: Any, field_name: str) -> int:
    if value is None:
        raise ValueError(f"'{field_name}' es obligatorio")
    if isinstance(value, bool):
        raise ValueError(f"'{field_name}' debe ser un entero válido")
    try:
        result = int(str(value).strip())
    except (TypeError, ValueError) as exc:
        raise ValueError(f"'{field_name}' debe ser un entero válido") from exc
    return result


def _as_float(value: Any, field_name: str) -> float:
    if value is None:
        raise ValueError(f"'{field_name}' es obligatorio")
    try:
        result = float(value)
    except (TypeError, ValueError) as exc:  # pragma: no cover - defensive
        raise ValueError(f"'{field_name}' debe ser numérico") from exc
    return result


def _as_optional_float(value: Any, field_name: str) -> Optional[float]:
    if value is None or value == "":
        return None
    return _as_float(value, field_name)


def _as_bool(value: Any, default: bool = True) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "si", "sí"}:
        return True
    if text in {"0", "false", "no"}:
        return False
    return default


def _as_list(value: Any, field_name: str) -> List[Any]:
    if value in (None, ""):
        return []
    if isinstance(value, Mapping):
        # Un único elemento en XML o YAML abreviado.
        return [value]
    if isinstance(value, str) or not isinstance(value, Iterable):
        raise ValueError(f"{field_name} debe ser una lista")
    return list(value)


def _as_str_list(value: Any, field_name: str) -> List[str]:
    if value in (None, ""):
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, Sequence):
        return [str(item).strip() for item in value if str(item).strip()]
    raise ValueError(f"{field_name} debe ser una lista o cadena")


# Plantilla de la base RRD -------------------------------------------------------


@dataclass(frozen=True)
class DataSourceDefinition:
    """Declaración ``DS`` de la plantilla; los campos se copian tal cual al comando."""

    name: str
    type: Optional[str] = None
    heartbeat: Optional[str] = None
    min: Optional[str] = None
    max: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DataSourceDefinition":
        if not isinstance(data, Mapping):
            raise ValueError("datasource[] debe ser un objeto")
        return cls(
            name=_as_str(data.get("name"), "datasource[].name"),
            type=_as_str(data.get("type"), "datasource[].type", optional=True),
            heartbeat=_as_str(data.get("heartbeat"), "datasource[].heartbeat", optional=True),
            min=_as_str(data.get("min"), "datasource[].min", optional=True),
            max=_as_str(data.get("max"), "datasource[].max", optional=True),
        )

    def missing_fields(self) -> List[str]:
        return [
            name
            for name in ("type", "heartbeat", "min", "max")
            if getattr(self, name) is None
        ]

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "name": self.name,
            "type": self.type,
            "heartbeat": self.heartbeat,
            "min": self.min,
            "max": self.max,
        }


@dataclass(frozen=True)
class ArchiveDefinition:
    """Regla de retención ``RRA`` de la plantilla."""

    cf: Optional[str] = None
    xff: Optional[str] = None
    steps: Optional[str] = None
    rows: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ArchiveDefinition":
        if not isinstance(data, Mapping):
            raise ValueError("archive[] debe ser un objeto")
        return cls(
            cf=_as_str(data.get("cf"), "archive[].cf", optional=True),
            xff=_as_str(data.get("xff"), "archive[].xff", optional=True),
            steps=_as_str(data.get("steps"), "archive[].steps", optional=True),
            rows=_as_str(data.get("rows"), "archive[].rows", optional=True),
        )

    def missing_fields(self) -> List[str]:
        return [name for name in ("cf", "xff", "steps", "rows") if getattr(self, name) is None]

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"cf": self.cf, "xff": self.xff, "steps": self.steps, "rows": self.rows}


@dataclass(frozen=True)
class RRDTemplate:
    step: int
    datasources: List[DataSourceDefinition] = field(default_factory=list)
    archives: List[ArchiveDefinition] = field(default_factory=list)
    path: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RRDTemplate":
        step = _as_int(data.get("step"), "step")
        if step <= 0:
            raise ValueError("step debe ser > 0")
        ds_payload = _as_list(data.get("datasource", data.get("datasources")), "datasource")
        datasources = [DataSourceDefinition.from_mapping(item) for item in ds_payload]
        if not datasources:
            raise ValueError("la plantilla debe declarar al menos un datasource")
        seen = set()
        for ds in datasources:
            if ds.name in seen:
                raise ValueError(f"datasource duplicado: {ds.name}")
            seen.add(ds.name)
        archive_payload = _as_list(data.get("archive", data.get("archives")), "archive")
        archives = [ArchiveDefinition.from_mapping(item) for item in archive_payload]
        path = _as_str(data.get("path"), "path", optional=True)
        return cls(step=step, datasources=datasources, archives=archives, path=path)

    @property
    def data_source_names(self) -> List[str]:
        return [ds.name for ds in self.datasources]

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "step": self.step,
            "datasource": [ds.to_dict() for ds in self.datasources],
            "archive": [rra.to_dict() for rra in self.archives],
        }
        if self.path:
            payload["path"] = self.path
        return payload


# Configuración de los escritores -----------------------------------------------


@dataclass
class RRDToolSettings:
    output_file: str
    template_file: str
    binary_path: str
    type_names: List[str] = field(default_factory=list)
    generate: bool = False
    timeout_s: Optional[float] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RRDToolSettings":
        output_file = _as_str(data.get("output_file", data.get("outputFile")), "output_file")
        template_file = _as_str(data.get("template_file", data.get("templateFile")), "template_file")
        binary_path = _as_str(data.get("binary_path", data.get("binaryPath")), "binary_path")
        type_names = _as_str_list(data.get("type_names", data.get("typeNames")), "type_names")
        generate = _as_bool(data.get("generate"), False)
        timeout_s = _as_optional_float(data.get("timeout_s"), "timeout_s")
        if timeout_s is not None and timeout_s <= 0:
            raise ValueError("timeout_s debe ser > 0")
        return cls(
            output_file=output_file,
            template_file=template_file,
            binary_path=binary_path,
            type_names=type_names,
            generate=generate,
            timeout_s=timeout_s,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "output_file": self.output_file,
            "template_file": self.template_file,
            "binary_path": self.binary_path,
            "type_names": list(self.type_names),
            "generate": self.generate,
            "timeout_s": self.timeout_s,
        }


@dataclass
class WriterSettings:
    outputs: List[RRDToolSettings] = field(default_factory=list)
    metrics_log_interval_s: float = 300.0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "WriterSettings":
        outputs_payload = _as_list(data.get("outputs"), "outputs")
        outputs = [RRDToolSettings.from_mapping(item) for item in outputs_payload]
        interval = _as_float(data.get("metrics_log_interval_s", 300.0), "metrics_log_interval_s")
        if interval < 0:
            raise ValueError("metrics_log_interval_s debe ser >= 0")
        return cls(outputs=outputs, metrics_log_interval_s=interval)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outputs": [output.to_dict() for output in self.outputs],
            "metrics_log_interval_s": self.metrics_log_interval_s,
        }
