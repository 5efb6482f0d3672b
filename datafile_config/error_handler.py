"""Error handler sinks invoked alongside logging on every not-found condition"""

import logging

logger = logging.getLogger(__name__)


class ErrorHandler:
    """
    Hook for errors signaled by the config accessors

    Subclass and override handle_error to forward errors somewhere useful
    (an error tracker, a metrics counter). The accessor has already logged
    the error by the time the handler sees it.
    """

    def handle_error(self, error: Exception) -> None:
        raise NotImplementedError


class NoOpErrorHandler(ErrorHandler):
    """Default handler: the error was logged, nothing more to do"""

    def handle_error(self, error: Exception) -> None:
        logger.debug(f"Ignoring {type(error).__name__}: {error}")


class RaiseExceptionErrorHandler(ErrorHandler):
    """Re-raises every error - for strict callers that prefer to fail fast"""

    def handle_error(self, error: Exception) -> None:
        raise error
