"""Derivación de nombres de datasource para rrdtool.

rrdtool limita los nombres de datasource a 19 caracteres. El nombre se arma con
el atributo (abreviado a sus iniciales si supera 15 caracteres) seguido del
md5 de ``grupo + atributo + subclave`` y se corta a 19 caracteres. Un atributo
corto deja pocos caracteres de hash: dos claves con el mismo prefijo legible y
el mismo comienzo de md5 colisionan. Con un atributo de 15 caracteres quedan 4
dígitos hexadecimales (probabilidad 1/65536 por par de series con ese mismo
atributo). No se corrige porque las bases existentes dependen de reproducir
exactamente estos nombres; las colisiones se detectan en cada ciclo.
"""

from __future__ import annotations

import hashlib
import unicodedata
from typing import Iterable, List, Optional

from rrdsink.errors import DuplicateIdentifierError

from .base import Sample, is_numeric

MAX_NAME_LENGTH = 19
MAX_PLAIN_ATTRIBUTE_LENGTH = 15
_INITIALS_DELIMITERS = (" ", ".")


def split_camel_case(text: str) -> List[str]:
    """Parte ``text`` por tipo de carácter Unicode respetando el camel case.

    ``"HeapMemoryUsage"`` -> ``["Heap", "Memory", "Usage"]``;
    ``"ASFRules2"`` -> ``["ASF", "Rules", "2"]``.
    """

    if not text:
        return []
    tokens: List[str] = []
    token_start = 0
    current = unicodedata.category(text[0])
    for pos in range(1, len(text)):
        category = unicodedata.category(text[pos])
        if category == current:
            continue
        if category == "Ll" and current == "Lu":
            new_start = pos - 1
            if new_start != token_start:
                tokens.append(text[token_start:new_start])
                token_start = new_start
        else:
            tokens.append(text[token_start:pos])
            token_start = pos
        current = category
    tokens.append(text[token_start:])
    return tokens


def initials(text: str, delimiters: Iterable[str] = _INITIALS_DELIMITERS) -> str:
    """Primer carácter de cada segmento separado por ``delimiters``."""

    delimiter_set = set(delimiters)
    chars: List[str] = []
    last_was_gap = True
    for ch in text:
        if ch in delimiter_set:
            last_was_gap = True
        elif last_was_gap:
            chars.append(ch)
            last_was_gap = False
    return "".join(chars)


def abbreviate(metric_name: str) -> str:
    if len(metric_name) <= MAX_PLAIN_ATTRIBUTE_LENGTH:
        return metric_name
    return initials(".".join(split_camel_case(metric_name)))


def data_source_name(series_group: Optional[str], metric_name: str, sub_key: str) -> str:
    raw = f"{series_group or ''}{metric_name}{sub_key}"
    digest = hashlib.md5(raw.encode("utf-8"), usedforsecurity=False).hexdigest()
    return (abbreviate(metric_name) + digest)[:MAX_NAME_LENGTH]


def sample_identifier(sample: Sample) -> str:
    return data_source_name(sample.series_group, sample.metric_name, sample.sub_key)


def render_datasource_snippet(samples: Iterable[Sample]) -> str:
    """Fragmentos ``<datasource>`` para pegar en una plantilla nueva."""

    lines = [""]
    seen = {}
    for sample in samples:
        if not is_numeric(sample.value):
            continue
        key = sample_identifier(sample)
        if key in seen:
            raise DuplicateIdentifierError(key, seen[key].describe(), sample.describe())
        seen[key] = sample
        lines.append(
            f"<datasource><!-- {sample.describe()} --><name>{key}</name><type>GAUGE</type>"
            "<heartbeat>400</heartbeat><min>U</min><max>U</max></datasource>"
        )
    return "\n".join(lines) + "\n"
