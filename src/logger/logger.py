import logging
import os
import sys
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler

from rich.console import Console
from rich.logging import RichHandler
from rich.traceback import install as install_rich_traceback

install_rich_traceback()

DATE_FOLDER_FORMAT = "%Y_%m_%d"


class DailyRotatingFileHandler(TimedRotatingFileHandler):
    """Writes to ``<log_dir>/<logger_name|errors>/<date>/<prefix><name>.log`` and follows the date."""

    def __init__(self, filename, log_dir, log_filename_prefix, logger_name, is_error_handler=False, *args, **kwargs):
        self.log_dir = log_dir
        self.log_filename_prefix = log_filename_prefix
        self.logger_name = logger_name
        self.is_error_handler = is_error_handler
        super().__init__(filename, *args, **kwargs)

    def _current_filename(self) -> str:
        current_date = datetime.now().strftime(DATE_FOLDER_FORMAT)
        folder = "errors" if self.is_error_handler else self.logger_name
        current_log_dir = os.path.join(self.log_dir, folder, current_date)
        return os.path.normpath(os.path.join(current_log_dir, f"{self.log_filename_prefix}{self.logger_name}.log"))

    def emit(self, record):
        current_filename = self._current_filename()
        base_filename = os.path.normpath(self.baseFilename) if getattr(self, 'baseFilename', None) else None

        if base_filename != current_filename:
            if getattr(self, 'stream', None):
                try:
                    self.stream.close()
                except OSError:
                    pass
            self.baseFilename = current_filename
            os.makedirs(os.path.dirname(current_filename), exist_ok=True)
            self.stream = self._open()

        super().emit(record)


class Logger(logging.Logger):
    def __init__(self, logger_name: str = '', log_filename_prefix: str = '', log_dir: str = None,
                 logger_debug: bool = False, file_logging: bool = True) -> None:
        sanitized_name = logger_name.replace('/', '_').replace('\\', '_')

        level = logging.DEBUG if logger_debug else logging.INFO
        super().__init__(sanitized_name, level)

        self.log_filename_prefix = log_filename_prefix
        self.file_logging = file_logging

        if log_dir is None:
            # Import config here to avoid circular imports
            from src.config.loader import config
            self.log_dir = config.LOG_DIR
        else:
            self.log_dir = log_dir

        self.date_format = "%d.%m.%Y %H:%M:%S"

        self._setup_logger()
        self.debug(f"Logger {sanitized_name} initialized with log directory: {self.log_dir}")

    def custom_exception_hook(self, exctype, value, traceback):
        if exctype == KeyboardInterrupt:
            print("KeyboardInterrupt caught. Exiting gracefully.")
        else:
            self.error("Uncaught exception", exc_info=(exctype, value, traceback))
            sys.exit(1)

    def _get_log_dir(self, is_error: bool = False) -> str:
        current_date = datetime.now().strftime(DATE_FOLDER_FORMAT)
        folder = 'errors' if is_error else (self.name or 'default')
        log_dir = os.path.join(self.log_dir, folder, current_date)
        os.makedirs(log_dir, exist_ok=True)
        return log_dir

    def _plain_formatter(self) -> logging.Formatter:
        format_string = "[{asctime}] {filename}.{funcName} - {message}" if self.level == logging.DEBUG else "[{asctime}] - {message}"
        return logging.Formatter(format_string, datefmt=self.date_format, style="{")

    def _setup_logger(self) -> None:
        if self.handlers:
            return
        self._add_console_handler()
        if self.file_logging:
            self.addHandler(self._make_file_handler(is_error=False))
            self.addHandler(self._make_file_handler(is_error=True))

    def _add_console_handler(self):
        console = Console(color_system="auto", width=160)
        rich_handler = RichHandler(console=console, rich_tracebacks=False, show_path=False)
        rich_handler.setLevel(self.level)
        self.addHandler(rich_handler)

    def _make_file_handler(self, is_error: bool) -> DailyRotatingFileHandler:
        name = self.name or "default"
        log_filename = os.path.join(self._get_log_dir(is_error=is_error), f"{self.log_filename_prefix}{name}.log")
        handler = DailyRotatingFileHandler(
            log_filename,
            self.log_dir,
            self.log_filename_prefix,
            name,
            is_error_handler=is_error,
            when='midnight',
            interval=1,
            backupCount=30,
            encoding='utf-8'
        )
        handler.setLevel(logging.ERROR if is_error else self.level)
        handler.setFormatter(self._plain_formatter())
        handler.namer = lambda filename: filename.replace(".log", "") + ".log"
        handler.rotator = lambda source, _dest: self._log_rotator(source, is_error=is_error)
        return handler

    def _log_rotator(self, source, is_error=False):
        new_file = os.path.join(self._get_log_dir(is_error=is_error), os.path.basename(source))
        open(new_file, 'a').close()
