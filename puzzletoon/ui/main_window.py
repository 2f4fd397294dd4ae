from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from puzzletoon.core.store import GameSnapshot
from puzzletoon.ui.bridge import StoreBridge
from puzzletoon.ui.models import build_level_cards, build_world_cards


class MainWindow(QMainWindow):
    """Top-level window: player stats, the world map and the selected world's levels.

    Every widget is rebuilt from the snapshot the bridge emits, so the window
    never holds game state of its own.  Closing it saves the game.
    """

    def __init__(self, bridge: StoreBridge) -> None:
        super().__init__()
        self._bridge = bridge
        self._selected_world: Optional[int] = None

        self.setWindowTitle("Puzzletoon")
        self.resize(720, 480)

        self._stats_label = QLabel()
        self._screen_label = QLabel()
        self._worlds_list = QListWidget()
        self._levels_list = QListWidget()
        self._finish_button = QPushButton("Finish level")
        self._abandon_button = QPushButton("Leave level")

        header = QHBoxLayout()
        header.addWidget(self._stats_label, 1)
        header.addWidget(self._screen_label)

        lists = QHBoxLayout()
        lists.addWidget(self._worlds_list, 1)
        lists.addWidget(self._levels_list, 1)

        buttons = QHBoxLayout()
        buttons.addStretch(1)
        buttons.addWidget(self._abandon_button)
        buttons.addWidget(self._finish_button)

        root = QVBoxLayout()
        root.addLayout(header)
        root.addLayout(lists, 1)
        root.addLayout(buttons)
        central = QWidget()
        central.setLayout(root)
        self.setCentralWidget(central)

        self._worlds_list.currentRowChanged.connect(self._on_world_selected)
        self._levels_list.itemActivated.connect(self._on_level_activated)
        self._finish_button.clicked.connect(self._bridge.finish_level)
        self._abandon_button.clicked.connect(self._bridge.abandon_level)
        self._bridge.snapshotChanged.connect(self._render)

        self._render(self._bridge.snapshot())

    @property
    def bridge(self) -> StoreBridge:
        return self._bridge

    def closeEvent(self, event: QCloseEvent) -> None:
        """Persist progress when closing the app."""
        self._bridge.close()
        super().closeEvent(event)

    def _on_world_selected(self, row: int) -> None:
        self._selected_world = row + 1 if row >= 0 else None
        self._render(self._bridge.snapshot())

    def _on_level_activated(self, item: QListWidgetItem) -> None:
        level_id = item.data(Qt.UserRole)
        if level_id:
            self._bridge.start_level(level_id)

    def _render(self, snapshot: GameSnapshot) -> None:
        player = snapshot.player
        self._stats_label.setText(
            f"{player.name}  ·  Brain stars {player.brain_stars}  ·  "
            f"Fragments {player.memory_fragments}  ·  Hints {player.hints}"
        )
        self._screen_label.setText(snapshot.current_screen.value.title())

        row = self._worlds_list.currentRow()
        self._worlds_list.blockSignals(True)
        self._worlds_list.clear()
        for card in build_world_cards(snapshot):
            lock = "🔒 " if card.locked else ""
            self._worlds_list.addItem(
                f"{lock}{card.world.name}  {card.completed_levels}/{card.total_levels}  ★{card.stars}"
            )
        self._worlds_list.setCurrentRow(row)
        self._worlds_list.blockSignals(False)

        self._levels_list.clear()
        if self._selected_world is not None:
            for card in build_level_cards(snapshot, self._selected_world):
                mark = "🔒 " if card.locked else ("✓ " if card.completed else "")
                item = QListWidgetItem(f"{mark}{card.level.name}  ★{card.level.stars}")
                item.setData(Qt.UserRole, None if card.locked else card.level.id)
                self._levels_list.addItem(item)

        in_level = self._bridge.current_run is not None
        self._finish_button.setEnabled(in_level)
        self._abandon_button.setEnabled(in_level)
