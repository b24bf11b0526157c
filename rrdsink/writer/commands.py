"""Construcción de las líneas de comando ``rrdtool create`` y ``rrdtool update``."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Sequence

from rrdsink.config.schema import RRDTemplate
from rrdsink.errors import ArgumentMismatchError, EmptyUpdateError, TemplateIncompleteError

RRDTOOL_BINARY = "rrdtool"


def _binary(binary_path: str | Path) -> str:
    return os.path.join(str(binary_path), RRDTOOL_BINARY)


def _canonical(output_path: str | Path) -> str:
    return str(Path(output_path).resolve())


def build_create_command(template: RRDTemplate, output_path: str | Path, binary_path: str | Path) -> List[str]:
    commands = [_binary(binary_path), "create", _canonical(output_path), "-s", str(template.step)]

    for ds in template.datasources:
        missing = ds.missing_fields()
        if missing:
            raise TemplateIncompleteError(
                f"datasource '{ds.name}' sin valor para: {', '.join(missing)}"
            )
        commands.append(f"DS:{ds.name}:{ds.type}:{ds.heartbeat}:{ds.min}:{ds.max}")

    if not template.archives:
        raise TemplateIncompleteError("la plantilla no declara ningún archive")
    for index, rra in enumerate(template.archives):
        missing = rra.missing_fields()
        if missing:
            raise TemplateIncompleteError(f"archive[{index}] sin valor para: {', '.join(missing)}")
        commands.append(f"RRA:{rra.cf}:{rra.xff}:{rra.steps}:{rra.rows}")

    return commands


def build_update_command(
    output_path: str | Path,
    binary_path: str | Path,
    identifiers: Sequence[str],
    values: Sequence[str],
) -> List[str]:
    """Línea de ``rrdtool update`` con la marca de tiempo ``N`` (ahora).

    Requiere listas alineadas y no vacías; quien llama omite el update cuando
    el ciclo no tiene valores.
    """

    if len(identifiers) != len(values):
        raise ArgumentMismatchError(
            f"{len(identifiers)} identificadores para {len(values)} valores"
        )
    if not identifiers:
        raise EmptyUpdateError("update sin valores: quien llama debe omitir la invocación")
    return [
        _binary(binary_path),
        "update",
        _canonical(output_path),
        "-t",
        ":".join(identifiers),
        "N:" + ":".join(values),
    ]
