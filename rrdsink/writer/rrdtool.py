"""Escritor que persiste resultados en una base RRD invocando ``rrdtool``."""

from __future__ import annotations

import enum
import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from rrdsink.config.schema import RRDTemplate, RRDToolSettings
from rrdsink.config.store import load_template
from rrdsink.errors import DuplicateIdentifierError, OutputDisabledError, RRDWriterError

from .base import OutputWriter, Result, Sample, format_value, is_numeric, iter_samples
from .commands import build_create_command, build_update_command
from .metrics import WriterMetrics
from .naming import render_datasource_snippet, sample_identifier
from .process import run_command

logger = logging.getLogger(__name__)

CommandRunner = Callable[[Sequence[str], Optional[float]], None]


class WriterState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    SCHEMA_LOADED = "schema_loaded"
    DATABASE_ENSURED = "database_ensured"
    READY = "ready"
    FAILED = "failed"


def resolve_values(samples: Iterable[Sample], declared: Iterable[str]) -> Tuple[Dict[str, str], int]:
    """Mapa identificador -> valor ordenado por identificador.

    Sólo entran muestras numéricas cuyo identificador está declarado en la
    plantilla. Devuelve también cuántas muestras numéricas se descartaron por
    no tener datasource.
    """

    declared_names = set(declared)
    contributors: Dict[str, Sample] = {}
    values: Dict[str, str] = {}
    dropped = 0
    for sample in samples:
        if not is_numeric(sample.value):
            continue
        key = sample_identifier(sample)
        if key not in declared_names:
            logger.debug("Datasource '%s' (%s) no declarado; se omite.", key, sample.describe())
            dropped += 1
            continue
        if key in contributors:
            raise DuplicateIdentifierError(key, contributors[key].describe(), sample.describe())
        contributors[key] = sample
        values[key] = format_value(sample.value)
    return {key: values[key] for key in sorted(values)}, dropped


class RRDToolWriter(OutputWriter):
    """Crea la base a partir de la plantilla si no existe y la actualiza cada ciclo."""

    def __init__(
        self,
        settings: RRDToolSettings,
        *,
        runner: CommandRunner = run_command,
        metrics: Optional[WriterMetrics] = None,
    ) -> None:
        self.settings = settings
        self.output_path = Path(settings.output_file)
        self.template_path = Path(settings.template_file)
        self._runner = runner
        self.metrics = metrics or WriterMetrics(target=str(self.output_path))
        self.state = WriterState.UNINITIALIZED
        self._template: Optional[RRDTemplate] = None
        self._failure: Optional[BaseException] = None

    # API del OutputWriter ----------------------------------------------------
    def open(self) -> None:
        self.ensure_database()

    def write(self, results: Sequence[Result]) -> Dict[str, str]:
        template = self.ensure_database()
        samples = list(iter_samples(results, self.settings.type_names))
        self._log_generated(samples)

        resolved, dropped = resolve_values(samples, template.data_source_names)
        self.metrics.record_cycle(resolved=len(resolved), dropped=dropped)
        if not resolved:
            logger.warning("No hay valores que escribir en %s para este ciclo.", self.output_path)
            return {}

        command = build_update_command(
            self.output_path,
            self.settings.binary_path,
            list(resolved.keys()),
            list(resolved.values()),
        )
        try:
            self._runner(command, self.settings.timeout_s)
        except RRDWriterError as exc:
            self.metrics.record_update(success=False)
            logger.error("rrdtool update falló para %s: %s", self.output_path, exc)
            raise
        self.metrics.record_update(success=True, written=len(resolved))
        self.state = WriterState.READY
        return resolved

    def close(self) -> None:
        self.metrics.maybe_log(force=True)

    # Lógica interna ----------------------------------------------------------
    def ensure_database(self) -> RRDTemplate:
        if self.state is WriterState.FAILED:
            raise OutputDisabledError(
                f"El destino {self.output_path} está deshabilitado hasta el próximo arranque"
            ) from self._failure
        if self._template is not None and self.state in {WriterState.DATABASE_ENSURED, WriterState.READY}:
            return self._template

        try:
            template = load_template(self.template_path)
            self._template = template
            self.state = WriterState.SCHEMA_LOADED
            if not self.output_path.exists():
                self._create_database(template)
        except (RRDWriterError, OSError) as exc:
            self.state = WriterState.FAILED
            self._failure = exc
            logger.error("No se pudo preparar la base %s: %s", self.output_path, exc)
            raise
        self.state = WriterState.DATABASE_ENSURED
        return template

    def _create_database(self, template: RRDTemplate) -> None:
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        command = build_create_command(template, self.output_path, self.settings.binary_path)
        logger.info("Creando base RRD %s con %d datasources", self.output_path, len(template.datasources))
        self._runner(command, self.settings.timeout_s)
        self.metrics.record_database_created()

    def _log_generated(self, samples: List[Sample]) -> None:
        if not (self.settings.generate and logger.isEnabledFor(logging.DEBUG)):
            return
        logger.debug(render_datasource_snippet(samples))
