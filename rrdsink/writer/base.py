"""Interfaces y utilidades comunes para los escritores de métricas."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from decimal import Decimal
from numbers import Integral, Real
from typing import Any, Dict, Iterator, List, Mapping, Optional, Protocol, Sequence, runtime_checkable

_NUMERIC_TEXT = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


@dataclass(frozen=True)
class Result:
    """Resultado de una consulta del colector: un atributo y sus sub-valores."""

    attribute_name: str
    values: Mapping[str, Any] = field(default_factory=dict)
    type_name: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Result":
        attribute = data.get("attribute_name", data.get("attributeName"))
        if not attribute:
            raise ValueError("'attribute_name' es obligatorio")
        values = data.get("values") or {}
        if not isinstance(values, Mapping):
            raise ValueError("values debe ser un objeto")
        type_name = data.get("type_name", data.get("typeName"))
        return cls(
            attribute_name=str(attribute),
            values=dict(values),
            type_name=str(type_name) if type_name else None,
        )


@dataclass(frozen=True)
class Sample:
    """Punto observado en el ciclo actual, ya aplanado."""

    series_group: str
    metric_name: str
    sub_key: str
    value: Any
    type_name: Optional[str] = None

    def describe(self) -> str:
        return f"{self.type_name}:{self.metric_name}:{self.sub_key}"


@runtime_checkable
class OutputWriter(Protocol):
    """Contrato mínimo para los escritores de resultados."""

    def open(self) -> None:
        """Prepara el destino antes del primer ciclo."""

    def write(self, results: Sequence[Result]) -> Mapping[str, str]:
        """Persiste los resultados de un ciclo."""

    def close(self) -> None:
        """Libera los recursos asociados al escritor."""


def _split_type_name_token(token: str) -> List[str]:
    # Mismo corte que String.split("=") de Java: descarta vacíos finales.
    parts = token.split("=")
    while parts and not parts[-1]:
        parts.pop()
    return parts


def type_name_values(type_name: Optional[str]) -> Dict[str, str]:
    """Pares ``clave=valor`` de un nombre de objeto JMX.

    Sólo cuentan los tokens con exactamente una clave y un valor; si una clave
    se repite gana la última aparición.
    """

    pairs: Dict[str, str] = {}
    if not type_name:
        return pairs
    for token in type_name.split(","):
        parts = _split_type_name_token(token)
        if len(parts) == 2:
            pairs[parts[0]] = parts[1]
    return pairs


def concat_type_name_values(type_name: Optional[str], type_names: Sequence[str]) -> str:
    """Concatena con ``_`` los valores de ``type_name`` para las claves indicadas.

    Las claves ausentes se omiten y el orden lo marca ``type_names``.
    """

    if not type_name or not type_names:
        return ""
    pairs = type_name_values(type_name)
    return "_".join(pairs[key] for key in type_names if key in pairs)


def is_numeric(value: Any) -> bool:
    if isinstance(value, bool) or value is None:
        return False
    if isinstance(value, (Real, Decimal)):
        return True
    if isinstance(value, str):
        return bool(_NUMERIC_TEXT.match(value.strip()))
    return False


def format_value(value: Any) -> str:
    """Representación textual que rrdtool acepta; NaN e infinitos pasan a ``U``.

    Los flotantes usan ``repr`` para no perder dígitos; cualquier otro real que
    no sea entero ni ``Decimal`` (``Fraction``, escalares de numpy) se
    convierte antes a ``float``.
    """

    if isinstance(value, str):
        return value.strip()
    if isinstance(value, Integral):
        return str(int(value))
    if isinstance(value, Decimal):
        if value.is_nan() or value.is_infinite():
            return "U"
        return str(value)
    number = float(value)
    if math.isnan(number) or math.isinf(number):
        return "U"
    return repr(number)


def iter_samples(results: Sequence[Result], type_names: Sequence[str] = ()) -> Iterator[Sample]:
    for res in results:
        if not res.values:
            continue
        group = concat_type_name_values(res.type_name, type_names)
        for key, value in res.values.items():
            yield Sample(
                series_group=group,
                metric_name=res.attribute_name,
                sub_key=str(key),
                value=value,
                type_name=res.type_name,
            )
