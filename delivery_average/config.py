import os
from dataclasses import dataclass

from dotenv import load_dotenv

# .env opcional en el directorio de trabajo; las variables ya exportadas mandan
load_dotenv()

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# en crudo: argparse los valida al construir los valores por defecto
DEFAULT_INPUT_FILE = os.getenv("DELIVERY_INPUT_FILE", "./events.json")
DEFAULT_WINDOW_SIZE = os.getenv("DELIVERY_WINDOW_SIZE", "10")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


@dataclass(frozen=True)
class RunConfig:
    input_file: str = DEFAULT_INPUT_FILE
    window_size: int = 10
    strict: bool = False
    log_level: str = "INFO"

    def __post_init__(self):
        if self.window_size < 0:
            raise ValueError("window_size must be >= 0")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"unknown log level {self.log_level!r}")
