"""
delivery-average: media móvil del tiempo de entrega de traducciones.

Lee un log de eventos (una línea JSON por evento) y escribe por stdout, para
cada minuto entre el primer y el último evento, la media de las duraciones de
los minutos con entregas dentro de la ventana:

    delivery-average --input_file events.json --window_size 10
"""
import argparse
import json
import logging
import sys
from typing import Iterable, Optional, TextIO

from .aggregations import aggregate_minutes, iter_moving_average
from .config import RunConfig, DEFAULT_INPUT_FILE, DEFAULT_WINDOW_SIZE, LOG_LEVEL, LOG_LEVELS
from .errors import DeliveryAverageError
from .reader import read_events

logger = logging.getLogger("delivery.main")


def non_negative_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid non-negative integer: {value!r}")
    if n < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {n}")
    return n


def log_level(value: str) -> str:
    level = value.upper()
    if level not in LOG_LEVELS:
        raise argparse.ArgumentTypeError(f"invalid choice: {value!r} (choose from {', '.join(LOG_LEVELS)})")
    return level


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="delivery-average",
        description="Moving average of translation delivery times, one record per minute.",
    )
    p.add_argument("--input_file", "--input-file", dest="input_file", default=DEFAULT_INPUT_FILE,
                   help="path to the events file (default: %(default)s)")
    p.add_argument("--window_size", "--window-size", dest="window_size", type=non_negative_int,
                   default=DEFAULT_WINDOW_SIZE,
                   help="window width in minutes used for the moving average (default: %(default)s)")
    p.add_argument("--strict", action="store_true",
                   help="abort on the first malformed record instead of skipping it")
    p.add_argument("--log-level", dest="log_level", type=log_level, default=LOG_LEVEL,
                   metavar="{" + ",".join(LOG_LEVELS) + "}",
                   help="logging level for diagnostics on stderr (default: %(default)s)")
    return p


def write_records(records: Iterable[dict], out: TextIO) -> int:
    n = 0
    for rec in records:
        out.write(json.dumps(rec) + "\n")
        n += 1
    return n


def run(cfg: RunConfig, out: TextIO) -> int:
    # 1) Leer todo el log (errores de lectura -> excepción al llamante)
    events, skipped = read_events(cfg.input_file, strict=cfg.strict)
    if skipped:
        logger.warning("%d malformed record(s) skipped in %s", skipped, cfg.input_file)

    # 2) Sumas por minuto efectivo
    minutes = aggregate_minutes(events)
    if minutes.is_empty:
        logger.warning("No delivery events in %s, nothing to output", cfg.input_file)
        return 0

    # 3) Barrido minuto a minuto con la ventana
    written = write_records(iter_moving_average(minutes, cfg.window_size), out)
    logger.info("Wrote %d records (window_size=%d)", written, cfg.window_size)
    return written


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, stream=sys.stderr)

    cfg = RunConfig(
        input_file=args.input_file,
        window_size=args.window_size,
        strict=args.strict,
        log_level=args.log_level,
    )

    try:
        run(cfg, sys.stdout)
    except DeliveryAverageError as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
