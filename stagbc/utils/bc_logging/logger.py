"""
Logging infrastructure for stagbc.

Provides structured logging with configurable levels, formatting, and color
support, plus helpers that report the boundary-condition setup and the
per-step constraint counts.
"""

from __future__ import annotations

import logging
import sys
import threading
import time
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar

import colorlog

if TYPE_CHECKING:
    from stagbc.boundary.spc import ConstraintSet
    from stagbc.config.core import BCConfig

_FORMAT = "%(asctime)s - %(name)-20s - %(levelname)-8s - %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


class BCFormatter(logging.Formatter):
    """Formatter for stagbc log records with optional colors and source location."""

    def __init__(self, use_colors: bool = False, include_location: bool = False):
        self.use_colors = use_colors
        self.include_location = include_location

        format_str = _FORMAT
        if self.include_location:
            format_str += " [%(filename)s:%(lineno)d]"

        if self.use_colors:
            self.colored_formatter = colorlog.ColoredFormatter(
                "%(log_color)s" + format_str,
                datefmt=_DATEFMT,
                log_colors={
                    "DEBUG": "cyan",
                    "INFO": "green",
                    "WARNING": "yellow",
                    "ERROR": "red",
                    "CRITICAL": "red,bg_white",
                },
            )

        super().__init__(format_str, datefmt=_DATEFMT)

    def format(self, record):
        if self.use_colors:
            return self.colored_formatter.format(record)
        return super().format(record)


class BCLogger:
    """
    Central logging manager for stagbc.

    Singleton: one instance holds the global configuration, and every logger
    handed out by ``get_logger`` is (re)configured from it. Logger creation
    is guarded by a lock so concurrent callers never attach duplicate
    handlers.
    """

    _instance = None
    _lock: ClassVar[threading.Lock] = threading.Lock()
    _loggers: ClassVar[dict[str, logging.Logger]] = {}
    _log_level = logging.INFO
    _log_to_file = False
    _log_file_path: Path | None = None
    _use_colors = True
    _include_location = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @classmethod
    def configure(
        cls,
        level: str | int = "INFO",
        log_to_file: bool = False,
        log_file_path: str | Path | None = None,
        use_colors: bool = True,
        include_location: bool = False,
    ):
        """
        Configure global logging settings for stagbc.

        Args:
            level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_to_file: Whether to log to file
            log_file_path: Path to log file (optional)
            use_colors: Use colored terminal output
            include_location: Include file location in log messages
        """
        with cls._lock:
            if isinstance(level, str):
                cls._log_level = getattr(logging, level.upper())
            else:
                cls._log_level = level

            cls._log_to_file = log_to_file
            cls._use_colors = use_colors
            cls._include_location = include_location

            if log_to_file:
                if log_file_path is None:
                    log_dir = Path.cwd() / "logs"
                    log_dir.mkdir(exist_ok=True)
                    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
                    cls._log_file_path = log_dir / f"stagbc_{timestamp}.log"
                else:
                    cls._log_file_path = Path(log_file_path)
                    cls._log_file_path.parent.mkdir(parents=True, exist_ok=True)

            for logger in cls._loggers.values():
                cls._setup_logger(logger)

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """
        Get or create a logger for the specified module/component.

        Args:
            name: Logger name (typically __name__ from calling module)

        Returns:
            Configured logger instance
        """
        if name in cls._loggers:
            return cls._loggers[name]

        with cls._lock:
            if name not in cls._loggers:
                logger = logging.getLogger(name)
                if not logger.handlers:
                    cls._setup_logger(logger)
                cls._loggers[name] = logger

        return cls._loggers[name]

    @classmethod
    def _setup_logger(cls, logger: logging.Logger):
        """Configure individual logger with current settings."""
        logger.handlers.clear()
        logger.setLevel(cls._log_level)

        formatter = BCFormatter(use_colors=cls._use_colors, include_location=cls._include_location)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        console_handler.setLevel(cls._log_level)
        logger.addHandler(console_handler)

        if cls._log_to_file and cls._log_file_path:
            file_handler = logging.FileHandler(cls._log_file_path)
            # File logs never carry color codes
            file_handler.setFormatter(BCFormatter(use_colors=False, include_location=cls._include_location))
            file_handler.setLevel(cls._log_level)
            logger.addHandler(file_handler)

        logger.propagate = False


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a logger for the current module.

    Args:
        name: Logger name (if None, uses calling module name)

    Returns:
        Configured logger instance
    """
    if name is None:
        import inspect

        frame = inspect.currentframe()
        if frame and frame.f_back:
            name = frame.f_back.f_globals.get("__name__", "stagbc")
        else:
            name = "stagbc"

    return BCLogger.get_logger(name)


def configure_logging(**kwargs):
    """
    Configure global logging settings.

    Keyword Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Whether to log to file
        log_file_path: Path to log file
        use_colors: Use colored terminal output
        include_location: Include file location in messages
    """
    BCLogger.configure(**kwargs)


def log_bc_summary(logger: logging.Logger, config: BCConfig):
    """Report the active boundary-condition setup, one line per configured feature."""
    logger.info("=== Boundary condition parameters ===")

    noslip = config.active_noslip_faces()
    if noslip:
        logger.info(f"  No-slip boundary mask [lt rt ft bk bm tp]: {' '.join(str(int(f)) for f in config.noslip)}")
    if config.open_top:
        logger.info("  Open top boundary")
    if config.open_bot:
        logger.info("  Open bottom boundary")
    if config.permeable_phase_inflow is not None:
        logger.info(f"  Inflow phase from bottom boundary: {config.permeable_phase_inflow}")

    background = config.background
    if background is not None:
        for name in ("exx", "eyy", "exy", "exz", "eyz"):
            schedule = getattr(background, name)
            if schedule is not None:
                logger.info(f"  Background strain rate {name}: {len(schedule.values)} period(s)")
        logger.info(f"  Background strain reference point: {tuple(background.ref_point)}")

    if config.blocks:
        logger.info(f"  Number of Bezier blocks: {len(config.blocks)}")
    if config.boxes:
        logger.info(f"  Number of velocity boxes: {len(config.boxes)}")
    if config.cylinders:
        logger.info(f"  Number of velocity cylinders: {len(config.cylinders)}")

    window = config.window
    if window is not None:
        logger.info(f"  Boundary inflow/outflow face: {window.face} (outflow mode {window.face_out})")
        logger.info(f"  Inflow window: [{window.bot}, {window.top}], relax distance {window.relax_dist}")
        logger.info(f"  Inflow temperature mode: {window.temperature_inflow}")

    plume = config.plume
    if plume is not None:
        logger.info(f"  Plume: {plume.type} {plume.dimension} radius {plume.radius} center {tuple(plume.center)}")

    if config.fix_phase is not None:
        logger.info(f"  Fixed phase: {config.fix_phase}")
    if config.fix_cell:
        logger.info(f"  Fixed cells from file: {config.fix_cell_file}")

    temperature = config.temperature
    if temperature.top is not None:
        logger.info(f"  Top boundary temperature: {temperature.top}")
    if temperature.bottom is not None:
        logger.info(f"  Bottom boundary temperature: {len(temperature.bottom.values)} period(s)")
    pressure = config.pressure
    if pressure.top is not None:
        logger.info(f"  Top boundary pressure: {pressure.top}")
    if pressure.bottom is not None:
        logger.info(f"  Bottom boundary pressure: {pressure.bottom}")

    settings = summarize_settings()
    log_file = settings["log_file_path"] if settings["log_to_file"] else "none"
    logger.debug(f"  Logging level {settings['level']}, log file: {log_file}")


def log_constraint_counts(logger: logging.Logger, constraints: ConstraintSet, time_value: float):
    """Log the size of the single-point constraint lists of one step."""
    logger.debug(
        f"Constraints at t={time_value:.6g}: velocity={constraints.velocity.count}, "
        f"pressure={constraints.pressure.count}, temperature={constraints.temperature.count}, "
        f"total={constraints.num_spc}"
    )


class LoggedOperation:
    """Context manager for logging timed operations."""

    def __init__(self, logger: logging.Logger, operation_name: str, log_level: int = logging.INFO):
        self.logger = logger
        self.operation_name = operation_name
        self.log_level = log_level
        self.start_time: float | None = None

    def __enter__(self):
        self.logger.log(self.log_level, f"Starting {self.operation_name}")
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = time.time() - (self.start_time or 0)

        if exc_type is None:
            self.logger.log(self.log_level, f"Completed {self.operation_name} in {duration:.3f}s")
        else:
            self.logger.error(f"Failed {self.operation_name} after {duration:.3f}s: {exc_val}")

        return False


def summarize_settings() -> dict[str, Any]:
    """Return the current global logging settings."""
    return {
        "level": logging.getLevelName(BCLogger._log_level),
        "log_to_file": BCLogger._log_to_file,
        "log_file_path": str(BCLogger._log_file_path) if BCLogger._log_file_path else None,
        "use_colors": BCLogger._use_colors,
        "include_location": BCLogger._include_location,
    }
