from collections import deque
from dataclasses import dataclass
from datetime import datetime, timedelta
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional

from .errors import MalformedTimestampError

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
# los logs reales traen microsegundos: "2018-12-26 18:11:08.509654"
_ACCEPTED_FORMATS = (TIMESTAMP_FORMAT, TIMESTAMP_FORMAT + ".%f")
ONE_MINUTE = timedelta(minutes=1)


@dataclass(frozen=True)
class DeliveryEvent:
    timestamp: str
    duration: int


@dataclass(frozen=True)
class MinuteTotals:
    """Suma de duraciones por minuto efectivo y el rango a recorrer.

    ``first_minute`` es un minuto anterior al primer minuto efectivo (orden de
    entrada) y ``last_minute`` el minuto efectivo del último evento. Ambos son
    ``None`` si no hubo eventos.
    """
    totals: Mapping[datetime, int]
    first_minute: Optional[datetime]
    last_minute: Optional[datetime]

    @property
    def is_empty(self) -> bool:
        return self.first_minute is None


def parse_timestamp(s: str) -> datetime:
    for fmt in _ACCEPTED_FORMATS:
        try:
            return datetime.strptime(s, fmt)
        except (TypeError, ValueError):
            continue
    raise MalformedTimestampError(s)


def effective_minute(ts: datetime) -> datetime:
    # se redondea hacia delante: lo entregado en 18:11:xx cuenta en 18:12
    return ts.replace(second=0, microsecond=0) + ONE_MINUTE


def format_minute(minute: datetime) -> str:
    return minute.strftime(TIMESTAMP_FORMAT)


def aggregate_minutes(events: Iterable[DeliveryEvent]) -> MinuteTotals:
    totals: dict[datetime, int] = {}
    first: Optional[datetime] = None
    last: Optional[datetime] = None

    for ev in events:
        minute = effective_minute(parse_timestamp(ev.timestamp))
        totals[minute] = totals.get(minute, 0) + ev.duration
        if first is None:
            first = minute - ONE_MINUTE
        last = minute

    return MinuteTotals(MappingProxyType(totals), first, last)


def update_window(queue: deque, window_size: int, value: int) -> deque:
    queue.append(value)
    if len(queue) > window_size:
        queue.popleft()
    return queue


def window_average(queue: Iterable[int]) -> float:
    # los minutos sin entregas (0) no cuentan ni en la suma ni en el divisor
    positives = [v for v in queue if v > 0]
    if not positives:
        return 0.0
    return sum(positives) / len(positives)


def iter_moving_average(minutes: MinuteTotals, window_size: int = 10) -> Iterator[dict]:
    if window_size < 0:
        raise ValueError("window_size must be >= 0")
    if minutes.is_empty:
        return

    queue: deque = deque()
    current = minutes.first_minute
    while current <= minutes.last_minute:
        update_window(queue, window_size, minutes.totals.get(current, 0))
        yield {
            "date": format_minute(current),
            "average_delivery_time": window_average(queue),
        }
        current += ONE_MINUTE


def moving_average(minutes: MinuteTotals, window_size: int = 10) -> list[dict]:
    return list(iter_moving_average(minutes, window_size))
