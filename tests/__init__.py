"""Test suite. Qt runs headless and all standard paths point at throwaway test locations."""
import os

from PySide6 import QtCore

os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')
QtCore.QStandardPaths.setTestModeEnabled(True)
