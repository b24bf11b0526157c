"""Jerarquía de errores del escritor de bases RRD."""

from __future__ import annotations

from typing import Any


class RRDWriterError(Exception):
    """Base de todos los errores emitidos por el escritor."""


class SchemaLoadError(RRDWriterError):
    """La plantilla de la base no existe, no se puede leer o es inválida."""


class TemplateIncompleteError(RRDWriterError):
    """La plantilla carece de campos necesarios para construir ``create``."""


class ArgumentMismatchError(RRDWriterError):
    """Las listas de identificadores y valores no están alineadas."""


class ProcessStartError(RRDWriterError):
    """No se pudo lanzar el binario de rrdtool."""


class ExternalToolError(RRDWriterError):
    """rrdtool escribió diagnósticos en su canal de error."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ProcessTimeoutError(ExternalToolError):
    """rrdtool no terminó dentro del tiempo configurado."""


class DuplicateIdentifierError(RRDWriterError):
    """Dos muestras del mismo ciclo derivan el mismo identificador."""

    def __init__(self, identifier: str, first: Any, second: Any) -> None:
        super().__init__(
            f"Duplicate datasource name found: '{identifier}'. Add more type_names to the "
            f"writer to make the name more unique. first={first} second={second}"
        )
        self.identifier = identifier
        self.first = first
        self.second = second


class OutputDisabledError(RRDWriterError):
    """El destino quedó deshabilitado tras fallar su inicialización."""


class EmptyUpdateError(RRDWriterError):
    """Se pidió un ``update`` sin valores; quien llama debe omitirlo."""
