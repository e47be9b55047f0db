"""
Logging Configuration
Console (and optional file) logging for the air-circle demo.
"""
import logging
import sys
from typing import Iterable, Optional

# mediapipe logs every graph start through absl; the demo only wants warnings from them
NOISY_LOGGERS = ("absl", "mediapipe", "matplotlib")


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None,
                  quiet: Iterable[str] = NOISY_LOGGERS) -> None:
    """
    Configures the root logger; every module logs through getLogger(__name__).

    Args:
        level: Level for our own modules (pipeline, circle_store, ...).
        log_file: Optional path; the session log is rewritten on each run.
        quiet: Third-party loggers held at WARNING whatever `level` is.
    """
    root = logging.getLogger()
    root.setLevel(level)

    # restarting the demo in the same interpreter would double every line
    for h in list(root.handlers):
        root.removeHandler(h)

    formatter = logging.Formatter(
        '%(asctime)s %(levelname)-7s [%(threadName)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    for name in quiet:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logging.getLogger(__name__).debug("logging ready (level=%s, file=%s)",
                                      logging.getLevelName(level), log_file)
