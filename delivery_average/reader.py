import json
import logging
from typing import Iterable, Iterator

from .aggregations import DeliveryEvent, parse_timestamp
from .errors import InputUnavailableError, MalformedEventError, MalformedTimestampError

logger = logging.getLogger("delivery.reader")


def decode_event(line: str, line_no: int | None = None) -> DeliveryEvent:
    """
    Convierte una línea JSON en DeliveryEvent.
    Solo se usan `timestamp` y `duration`; el resto de campos se ignora.
    """
    try:
        obj = json.loads(line)
    except json.JSONDecodeError as e:
        raise MalformedEventError(f"invalid JSON ({e.msg})", line_no) from e
    if not isinstance(obj, dict):
        raise MalformedEventError("record is not a JSON object", line_no)

    for field in ("timestamp", "duration"):
        if field not in obj:
            raise MalformedEventError(f"missing field {field!r}", line_no)

    ts = obj["timestamp"]
    try:
        parse_timestamp(ts)
    except MalformedTimestampError:
        raise MalformedTimestampError(ts, line_no) from None

    duration = obj["duration"]
    # bool es subclase de int en Python
    if isinstance(duration, bool) or not isinstance(duration, int) or duration < 0:
        raise MalformedEventError(f"duration must be a non-negative integer, got {duration!r}", line_no)

    return DeliveryEvent(timestamp=ts, duration=duration)


def _decode_line(line: str | bytes, line_no: int) -> str:
    if isinstance(line, str):
        return line
    # utf-8-sig: un BOM al inicio del fichero no invalida el primer registro
    try:
        return line.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise MalformedEventError(f"not valid UTF-8 ({e.reason})", line_no) from e


class EventReader:
    """Decodifica líneas de eventos contando las descartadas.

    En modo estricto la primera línea mal formada corta la lectura.
    """

    def __init__(self, strict: bool = False):
        self.strict = strict
        self.skipped = 0

    def iter_events(self, lines: Iterable[str | bytes]) -> Iterator[DeliveryEvent]:
        for line_no, line in enumerate(lines, start=1):
            try:
                text = _decode_line(line, line_no)
                if not text.strip():
                    continue
                yield decode_event(text, line_no)
            except MalformedEventError as e:
                if self.strict:
                    raise
                self.skipped += 1
                logger.warning("Skipping malformed record: %s", e)


def read_events(path: str, strict: bool = False) -> tuple[list[DeliveryEvent], int]:
    """
    Lee el fichero completo (la media se calcula sobre todo el log).
    Devuelve (eventos, nº de líneas descartadas).
    """
    reader = EventReader(strict=strict)
    try:
        # binario: cada línea se decodifica por separado y una mala solo se descarta
        with open(path, "rb") as f:
            events = list(reader.iter_events(f))
    except OSError as e:
        raise InputUnavailableError(path, e.strerror or str(e)) from e

    logger.debug("Read %d events from %s (%d skipped)", len(events), path, reader.skipped)
    return events, reader.skipped
