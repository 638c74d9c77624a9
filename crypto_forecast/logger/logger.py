import logging
import os
import sys
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler

from rich.console import Console
from rich.logging import RichHandler
from rich.traceback import install as install_rich_traceback

install_rich_traceback()


class DailyRotatingFileHandler(TimedRotatingFileHandler):
    """File handler that writes into a per-day directory: <log_dir>/<bucket>/<YYYY_MM_DD>/<file>.log"""

    def __init__(self, filename, log_dir, file_stem, bucket, *args, **kwargs):
        self.log_dir = log_dir
        self.file_stem = file_stem
        self.bucket = bucket
        super().__init__(filename, *args, **kwargs)

    def _current_path(self) -> str:
        current_date = datetime.now().strftime("%Y_%m_%d")
        return os.path.normpath(os.path.join(self.log_dir, self.bucket, current_date, f"{self.file_stem}.log"))

    def emit(self, record):
        current_path = self._current_path()

        if os.path.normpath(self.baseFilename) != current_path:
            if self.stream:
                self.stream.close()
                self.stream = None
            os.makedirs(os.path.dirname(current_path), exist_ok=True)
            self.baseFilename = current_path
            self.stream = self._open()

        super().emit(record)


class Logger(logging.Logger):
    def __init__(self, logger_name: str = '', log_filename_prefix: str = '', log_dir: str = 'logs',
                 logger_debug: bool = False, log_to_file: bool = True) -> None:
        sanitized_name = logger_name.replace('/', '_').replace('\\', '_') or 'default'

        level = logging.DEBUG if logger_debug else logging.INFO
        super().__init__(sanitized_name, level)

        self.log_filename_prefix = log_filename_prefix
        self.log_dir = log_dir
        self.log_to_file = log_to_file
        self.date_format = "%d.%m.%Y %H:%M:%S"

        self._setup_logger()
        self.debug(f"Logger {sanitized_name} initialized with log directory: {self.log_dir}")

    def custom_exception_hook(self, exctype, value, traceback):
        if exctype == KeyboardInterrupt:
            print("KeyboardInterrupt caught. Exiting gracefully.")
        else:
            self.error("Uncaught exception", exc_info=(exctype, value, traceback))
            sys.exit(1)

    def _file_stem(self) -> str:
        return f"{self.log_filename_prefix}{self.name}"

    def _plain_formatter(self) -> logging.Formatter:
        format_string = "[{asctime}] {filename}.{funcName} - {message}" if self.level == logging.DEBUG else "[{asctime}] - {message}"
        return logging.Formatter(format_string, datefmt=self.date_format, style="{")

    def _setup_logger(self) -> None:
        if self.handlers:
            return
        self._add_console_handler()
        if self.log_to_file:
            self._add_file_handler(bucket=self.name, level=self.level)
            self._add_file_handler(bucket='errors', level=logging.ERROR)

    def _add_console_handler(self):
        console = Console(color_system="auto", width=180)
        rich_handler = RichHandler(console=console, rich_tracebacks=False)
        rich_handler.setLevel(self.level)
        self.addHandler(rich_handler)

    def _add_file_handler(self, bucket: str, level: int):
        current_date = datetime.now().strftime("%Y_%m_%d")
        bucket_dir = os.path.join(self.log_dir, bucket, current_date)
        os.makedirs(bucket_dir, exist_ok=True)

        file_handler = DailyRotatingFileHandler(
            os.path.join(bucket_dir, f"{self._file_stem()}.log"),
            self.log_dir,
            self._file_stem(),
            bucket,
            when='midnight',
            interval=1,
            backupCount=30,
            encoding='utf-8',
            delay=True
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(self._plain_formatter())
        self.addHandler(file_handler)
