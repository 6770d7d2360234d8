"""
Nearby List Widget Module.

Displays the latest nearby search results, nearest first, with a refresh
control.
"""

from typing import List

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from trashmap.core.poi import PointOfInterest
from trashmap.core.popup_content import DEFAULT_TITLE, format_distance


class NearbyListWidget(QWidget):
    """
    A dumb widget that purely displays search results.
    Emits signals when user interacts.
    """

    trashcan_selected = Signal(object)  # entity id
    refresh_requested = Signal()
    contribute_requested = Signal()

    def __init__(self, parent=None):
        """
        Initializes the NearbyListWidget.

        Args:
            parent (QWidget, optional): The parent widget. Defaults to None.
        """
        super().__init__(parent)
        self.layout = QVBoxLayout(self)
        self.layout.setContentsMargins(4, 4, 4, 4)

        self.btn_refresh = QPushButton("Search Nearby")
        self.btn_refresh.clicked.connect(self.refresh_requested.emit)

        self.btn_contribute = QPushButton("Add Trash Can")
        self.btn_contribute.clicked.connect(self.contribute_requested.emit)

        top_bar = QHBoxLayout()
        top_bar.addWidget(self.btn_refresh)
        top_bar.addWidget(self.btn_contribute)
        self.layout.addLayout(top_bar)

        self.list_widget = QListWidget()
        self.list_widget.itemClicked.connect(self._on_item_clicked)
        self.layout.addWidget(self.list_widget)

        self.empty_label = QLabel("No trash cans nearby")
        self.empty_label.setAlignment(Qt.AlignCenter)
        self.layout.addWidget(self.empty_label)
        self.list_widget.hide()

    def set_results(self, results: List[PointOfInterest]):
        """
        Populates the list with results, keeping their order.
        """
        self.list_widget.clear()

        if not results:
            self.list_widget.hide()
            self.empty_label.show()
            return

        self.list_widget.show()
        self.empty_label.hide()

        for poi in results:
            label = poi.address or DEFAULT_TITLE
            if poi.distance_km is not None:
                label = f"{label} ({format_distance(poi.distance_km)})"
            item = QListWidgetItem(label)
            item.setData(Qt.UserRole, poi.id)
            self.list_widget.addItem(item)

    def set_busy(self, busy: bool):
        self.btn_refresh.setEnabled(not busy)

    def _on_item_clicked(self, item: QListWidgetItem):
        self.trashcan_selected.emit(item.data(Qt.UserRole))
