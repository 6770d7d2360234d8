from PySide6.QtCore import Qt
from PySide6.QtGui import QPixmap
from PySide6.QtWidgets import (
    QDialog,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
)


class ImageViewerDialog(QDialog):
    """
    Modal dialog showing a trash can photo at full size.

    The dialog opens with a loading message; the caller supplies the bytes
    once the download finishes, or an error message if it fails.
    """

    def __init__(self, parent=None, url: str = ""):
        super().__init__(parent)
        self.setWindowTitle("Trash Can Photo")
        self.resize(800, 600)

        self.url = url

        self.init_ui()
        self.image_label.setText("Loading image...")

    def init_ui(self):
        layout = QVBoxLayout(self)

        # Image Area
        self.scroll_area = QScrollArea()
        self.scroll_area.setWidgetResizable(True)
        self.scroll_area.setAlignment(Qt.AlignCenter)
        self.image_label = QLabel()
        self.image_label.setAlignment(Qt.AlignCenter)
        self.scroll_area.setWidget(self.image_label)
        layout.addWidget(self.scroll_area)

        self.caption_label = QLabel(self.url)
        self.caption_label.setAlignment(Qt.AlignCenter)
        self.caption_label.setWordWrap(True)
        layout.addWidget(self.caption_label)

        button_layout = QHBoxLayout()
        self.btn_close = QPushButton("Close")
        self.btn_close.clicked.connect(self.accept)
        button_layout.addStretch()
        button_layout.addWidget(self.btn_close)
        layout.addLayout(button_layout)

    def set_image_data(self, data: bytes) -> bool:
        """
        Displays downloaded image bytes.

        Args:
            data: Encoded image (PNG, JPEG, ...).

        Returns:
            bool: False if the bytes could not be decoded.
        """
        pixmap = QPixmap()
        if not pixmap.loadFromData(data):
            self.image_label.setText("Failed to load image.")
            return False
        self.image_label.setPixmap(pixmap)
        return True

    def show_error(self, message: str):
        self.image_label.setText(f"Failed to load image: {message}")
