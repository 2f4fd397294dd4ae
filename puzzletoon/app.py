"""Application entry point: builds the game store and shows the main window."""

import logging
import os
import sys
from typing import Optional

from PySide6.QtWidgets import QApplication

from puzzletoon.core.persistence import SaveSlot
from puzzletoon.core.store import GameStore
from puzzletoon.ui.bridge import StoreBridge
from puzzletoon.ui.main_window import MainWindow

UNLOCK_ALL_ENV_VAR = "PUZZLETOON_UNLOCK_ALL"


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def build_store(slot: Optional[SaveSlot] = None) -> GameStore:
    """Load the saved game (or defaults) and apply developer overrides."""
    slot = slot if slot is not None else SaveSlot()
    store = GameStore(slot=slot)
    logging.info("Save slot: %s", slot.path)

    if os.environ.get(UNLOCK_ALL_ENV_VAR) == "1":
        store.unlock_all_levels()
        logging.info("All levels unlocked (%s=1)", UNLOCK_ALL_ENV_VAR)
    return store


def build_window(store: GameStore) -> MainWindow:
    """Wire a store to a bridge and the window that owns it."""
    bridge = StoreBridge(store)
    window = MainWindow(bridge)
    bridge.setParent(window)
    return window


def run() -> None:
    """Initialize the application, load the save, and start the main window."""
    configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName("Puzzletoon")
    app.setApplicationDisplayName("Puzzletoon")

    window = build_window(build_store())
    app.aboutToQuit.connect(window.bridge.close)
    window.show()

    sys.exit(app.exec())
