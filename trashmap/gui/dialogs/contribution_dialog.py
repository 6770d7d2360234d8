"""
Contribution Dialog.

Form for adding a new trash can: a location (typed or picked on the map),
optional address and description, and a required photo. The dialog is
modeless so the map stays clickable while picking.
"""

import logging
from typing import Optional

from PySide6.QtCore import Qt, Signal, Slot
from PySide6.QtGui import QDoubleValidator, QPixmap
from PySide6.QtWidgets import (
    QDialog,
    QFileDialog,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPlainTextEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from trashmap.app.constants import IMAGE_FILE_FILTER
from trashmap.services.contribution import ContributionDraft

logger = logging.getLogger(__name__)

PREVIEW_SIZE = 240


def _parse_coordinate(text: str) -> Optional[float]:
    text = text.strip()
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


class ContributionDialog(QDialog):
    """
    Dialog for submitting a new trash can.

    Signals:
        pick_toggled: The "Pick on map" button changed state. Args: (checked)
        submit_requested: The user pressed Submit. Args: (draft)
    """

    pick_toggled = Signal(bool)
    submit_requested = Signal(object)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        """
        Initialize the Contribution Dialog.

        Args:
            parent: Parent widget.
        """
        super().__init__(parent)
        self.setWindowTitle("Add Trash Can")
        self.setMinimumWidth(420)
        self.setModal(False)

        main_layout = QVBoxLayout(self)
        self._create_location_section(main_layout)
        self._create_details_section(main_layout)

        self.lbl_status = QLabel()
        self.lbl_status.setWordWrap(True)
        main_layout.addWidget(self.lbl_status)

        main_layout.addStretch()
        self._create_buttons(main_layout)

    def _create_location_section(self, parent_layout: QVBoxLayout) -> None:
        """Create the coordinate inputs."""
        group = QGroupBox("Location")
        layout = QFormLayout(group)

        self.edit_lat = QLineEdit()
        self.edit_lat.setValidator(QDoubleValidator(-90.0, 90.0, 6, self))
        self.edit_lat.setPlaceholderText("Latitude")
        layout.addRow("Latitude:", self.edit_lat)

        self.edit_lng = QLineEdit()
        self.edit_lng.setValidator(QDoubleValidator(-180.0, 180.0, 6, self))
        self.edit_lng.setPlaceholderText("Longitude")
        layout.addRow("Longitude:", self.edit_lng)

        self.btn_pick = QPushButton("Pick on map")
        self.btn_pick.setCheckable(True)
        self.btn_pick.setToolTip("Click on the map to fill in the coordinates")
        self.btn_pick.toggled.connect(self.pick_toggled.emit)
        layout.addRow(self.btn_pick)

        parent_layout.addWidget(group)

    def _create_details_section(self, parent_layout: QVBoxLayout) -> None:
        """Create the address, description and photo inputs."""
        group = QGroupBox("Details")
        layout = QFormLayout(group)

        self.edit_address = QLineEdit()
        layout.addRow("Address:", self.edit_address)

        self.edit_description = QPlainTextEdit()
        self.edit_description.setMaximumHeight(80)
        layout.addRow("Description:", self.edit_description)

        image_layout = QHBoxLayout()
        self.edit_image = QLineEdit()
        self.edit_image.setReadOnly(True)
        self.edit_image.setPlaceholderText("No image selected")
        self.btn_browse = QPushButton("Browse...")
        self.btn_browse.clicked.connect(self._browse_image)
        image_layout.addWidget(self.edit_image)
        image_layout.addWidget(self.btn_browse)
        layout.addRow("Photo:", image_layout)

        self.lbl_preview = QLabel("No image selected")
        self.lbl_preview.setAlignment(Qt.AlignCenter)
        self.lbl_preview.setMinimumHeight(PREVIEW_SIZE // 2)
        self.edit_image.textChanged.connect(self._update_preview)
        layout.addRow(self.lbl_preview)

        parent_layout.addWidget(group)

    def _create_buttons(self, parent_layout: QVBoxLayout) -> None:
        """Create the dialog buttons."""
        button_layout = QHBoxLayout()
        button_layout.addStretch()

        self.btn_cancel = QPushButton("Cancel")
        self.btn_cancel.clicked.connect(self.reject)
        button_layout.addWidget(self.btn_cancel)

        self.btn_submit = QPushButton("Submit")
        self.btn_submit.setDefault(True)
        self.btn_submit.clicked.connect(self._on_submit_clicked)
        button_layout.addWidget(self.btn_submit)

        parent_layout.addLayout(button_layout)

    @Slot()
    def _browse_image(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(
            self, "Select Photo", "", IMAGE_FILE_FILTER
        )
        if file_path:
            self.edit_image.setText(file_path)

    @Slot(str)
    def _update_preview(self, path: str) -> None:
        self.lbl_preview.clear()
        if not path:
            self.lbl_preview.setText("No image selected")
            return

        pixmap = QPixmap(path)
        if pixmap.isNull():
            logger.warning(f"Cannot preview image: {path}")
            self.lbl_preview.setText("Preview unavailable")
            return

        if pixmap.width() > PREVIEW_SIZE or pixmap.height() > PREVIEW_SIZE:
            pixmap = pixmap.scaled(
                PREVIEW_SIZE,
                PREVIEW_SIZE,
                Qt.KeepAspectRatio,
                Qt.SmoothTransformation,
            )
        self.lbl_preview.setPixmap(pixmap)

    @Slot()
    def _on_submit_clicked(self) -> None:
        self.lbl_status.clear()
        self.submit_requested.emit(self.draft())

    def set_location(self, lat: float, lng: float) -> None:
        """Fills the coordinate fields, e.g. from a map pick."""
        self.edit_lat.setText(f"{lat:.6f}")
        self.edit_lng.setText(f"{lng:.6f}")

    def draft(self) -> ContributionDraft:
        """
        Snapshot of the form as a draft.

        Returns:
            ContributionDraft: A new draft; later edits do not affect it.
        """
        return ContributionDraft(
            latitude=_parse_coordinate(self.edit_lat.text()),
            longitude=_parse_coordinate(self.edit_lng.text()),
            address=self.edit_address.text(),
            description=self.edit_description.toPlainText(),
            image_path=self.edit_image.text() or None,
        )

    def load_draft(self, draft: ContributionDraft) -> None:
        """Fills the form from a draft."""
        if draft.has_location:
            self.set_location(draft.latitude, draft.longitude)
        else:
            self.edit_lat.clear()
            self.edit_lng.clear()
        self.edit_address.setText(draft.address)
        self.edit_description.setPlainText(draft.description)
        self.edit_image.setText(draft.image_path or "")

    def set_busy(self, busy: bool) -> None:
        self.btn_submit.setEnabled(not busy)
        if busy:
            self.lbl_status.setText("Uploading...")

    def show_error(self, message: str) -> None:
        self.lbl_status.setText(message)

    def set_picking(self, picking: bool) -> None:
        """Updates the pick button without re-emitting ``pick_toggled``."""
        self.btn_pick.blockSignals(True)
        self.btn_pick.setChecked(picking)
        self.btn_pick.blockSignals(False)
