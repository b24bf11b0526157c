"""Registro de escritores disponibles y utilidades de construcción."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from rrdsink.config.schema import WriterSettings

from .base import OutputWriter, Result, Sample
from .metrics import WriterMetrics
from .rrdtool import RRDToolWriter, WriterState

logger = logging.getLogger(__name__)

__all__ = [
    "OutputWriter",
    "Result",
    "Sample",
    "RRDToolWriter",
    "WriterMetrics",
    "WriterState",
    "build_writers",
]


def build_writers(settings: WriterSettings) -> List[RRDToolWriter]:
    """Inicializa un escritor por cada destino indicado en la configuración."""

    writers: List[RRDToolWriter] = []
    seen = set()

    for output in settings.outputs:
        target = Path(output.output_file).resolve()
        if target in seen:
            logger.warning("Destino '%s' configurado más de una vez; se omite el duplicado.", target)
            continue
        seen.add(target)
        metrics = WriterMetrics(
            target=str(target),
            log_interval_s=settings.metrics_log_interval_s,
            logger=logging.getLogger(f"{__name__}.metrics"),
        )
        writers.append(RRDToolWriter(output, metrics=metrics))

    return writers
