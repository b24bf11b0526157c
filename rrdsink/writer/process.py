"""Ejecución de rrdtool como subproceso."""

from __future__ import annotations

import logging
import subprocess
from typing import Optional, Sequence

from rrdsink.errors import ExternalToolError, ProcessStartError, ProcessTimeoutError

logger = logging.getLogger(__name__)


def run_command(args: Sequence[str], timeout_s: Optional[float] = None) -> None:
    """Ejecuta ``args`` y falla si el proceso escribió algo en stderr.

    rrdtool informa cualquier problema por stderr, así que el código de salida
    no se consulta. stdout se descarta. Sin ``timeout_s`` la llamada bloquea
    hasta que el proceso termine.
    """

    args_list = [str(arg) for arg in args]
    logger.debug("Ejecutando %s", " ".join(args_list))
    try:
        process = subprocess.Popen(
            args_list,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
        )
    except OSError as exc:
        raise ProcessStartError(f"No se pudo ejecutar {args_list[0]}: {exc}") from exc

    with process:
        try:
            _, stderr = process.communicate(timeout=timeout_s)
        except subprocess.TimeoutExpired as exc:
            process.kill()
            process.communicate()
            raise ProcessTimeoutError(
                f"{args_list[0]} no terminó en {timeout_s}s"
            ) from exc

    message = "".join((stderr or "").splitlines())
    if message:
        raise ExternalToolError(message)
