"""Application-wide Qt signals for FinanceTracker.

This module provides:
    - Signals: custom Qt signals for configuration changes, user-facing error
      notifications and log viewer requests.
"""
import logging

from PySide6 import QtCore


class Signals(QtCore.QObject):
    """Centralized Qt signals for application config and notification events."""
    configSectionChanged = QtCore.Signal(str)
    metadataChanged = QtCore.Signal(str, object)

    # Every status exception, see FinanceTracker.status. Screens relay their own
    # failures on BaseScreen.errorOccurred, so a view showing a screen listens to
    # that signal and leaves this one to the application shell.
    error = QtCore.Signal(str)
    showLogs = QtCore.Signal()

    def __init__(self):
        super().__init__()
        self._connect_signals()

    def _connect_signals(self):
        @QtCore.Slot(str, object)
        def metadata_changed(key: str, value: object) -> None:
            logging.debug(f'Metadata "{key}" changed to {value!r}')

        self.metadataChanged.connect(metadata_changed)


signals = Signals()
