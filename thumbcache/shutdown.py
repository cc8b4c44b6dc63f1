"""
ShutdownCoordinator - Runs registered cleanup callbacks during shutdown.
"""

import logging
from typing import Callable, List, Optional, Tuple

ShutdownHook = Callable[[], None]


class ShutdownCoordinator:
    """
    Holds cleanup callbacks and runs all of them when shutdown is requested.

    Hooks run in registration order. A hook that raises is logged and the
    remaining hooks still run.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._hooks: List[Tuple[str, ShutdownHook]] = []
        self._has_run = False

    def register(self, hook: ShutdownHook, name: Optional[str] = None) -> None:
        """Register a zero-argument callback."""
        self._hooks.append((name or getattr(hook, '__name__', repr(hook)), hook))

    @property
    def hook_names(self) -> List[str]:
        return [name for name, _ in self._hooks]

    @property
    def has_run(self) -> bool:
        return self._has_run

    def shutdown(self) -> List[Exception]:
        """
        Run every registered hook once.

        Returns:
            The exceptions raised by failing hooks
        """
        if self._has_run:
            self.logger.debug("Shutdown already performed")
            return []
        self._has_run = True

        errors: List[Exception] = []
        for name, hook in self._hooks:
            try:
                hook()
            except Exception as e:
                self.logger.error(f"Shutdown hook {name!r} failed: {e}")
                errors.append(e)
        return errors
