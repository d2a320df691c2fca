import contextvars
import logging
import sys
from collections.abc import Generator
from contextlib import contextmanager

_run_id: contextvars.ContextVar[str] = contextvars.ContextVar("run_id", default="-")


class _RunIdFilter(logging.Filter):
    """Stamps every record with the batch run id of the current context."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = _run_id.get()
        return True


class Log:
    """Centralized logging with structured format.

    Lines written while a batch is active carry its run id, so the output of
    concurrent batches and their worker threads can be told apart.
    """

    _logger: logging.Logger = logging.getLogger("adinvoice")
    _logger.addFilter(_RunIdFilter())

    FORMAT = "%(asctime)s [%(levelname)s] %(threadName)s %(run_id)s %(message)s"

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Configure the logger with the specified level and stdout handler."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(logging.Formatter(cls.FORMAT))
            cls._logger.addHandler(handler)

    @classmethod
    @contextmanager
    def run_context(cls, run_id: str) -> Generator[None, None, None]:
        """Tag log lines of the current thread with run_id until the block exits."""
        token = _run_id.set(run_id)
        try:
            yield
        finally:
            _run_id.reset(token)

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        cls._logger.debug(message, extra=kwargs)

    @classmethod
    def exception(cls, message: str, **kwargs: object) -> None:
        """Log an error with the traceback of the exception being handled."""
        cls._logger.exception(message, extra=kwargs)
