"""
Main Window Module.

Hosts the Leaflet map, the nearby list dock and the dialogs, and owns the
worker thread that talks to the backend.
"""

from typing import Optional

from PySide6.QtCore import QSettings, Qt, QThread, QTimer, Slot
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import QDockWidget, QMainWindow

from trashmap.app.config import AppConfig
from trashmap.app.constants import (
    DEFAULT_WINDOW_HEIGHT,
    DEFAULT_WINDOW_WIDTH,
    WINDOW_SETTINGS_APP,
    WINDOW_SETTINGS_KEY,
    WINDOW_TITLE,
)
from trashmap.app.map_controller import MapController
from trashmap.core.logging_config import get_logger
from trashmap.gui.dialogs.contribution_dialog import ContributionDialog
from trashmap.gui.dialogs.image_viewer_dialog import ImageViewerDialog
from trashmap.gui.widgets.map import LeafletMapView
from trashmap.gui.widgets.nearby_list import NearbyListWidget
from trashmap.services.api_client import TrashCanApiClient
from trashmap.services.scheduler import QtScheduler
from trashmap.services.worker import ApiWorker

logger = get_logger(__name__)


class MainWindow(QMainWindow):
    """
    The main application window.

    Construction wires everything up; the first location lookup is deferred
    until the event loop is running.
    """

    def __init__(self, config: Optional[AppConfig] = None) -> None:
        """
        Initializes the MainWindow.

        Args:
            config: Application configuration. Defaults to the environment.
        """
        super().__init__()
        self.config = config or AppConfig.from_env()
        logger.debug(f"MainWindow initialization started (api={self.config.api_url})")

        self.setWindowTitle(WINDOW_TITLE)
        self.resize(DEFAULT_WINDOW_WIDTH, DEFAULT_WINDOW_HEIGHT)

        self._init_worker()
        self._init_widgets()
        self._connect_signals()
        self._restore_geometry()

        self._contribution_dialog: Optional[ContributionDialog] = None
        self._image_dialog: Optional[ImageViewerDialog] = None

        QTimer.singleShot(100, self.controller.start)

    def _init_worker(self) -> None:
        """Creates the ApiWorker and moves it to its own thread."""
        self.client = TrashCanApiClient(
            self.config.api_url, timeout=self.config.api_timeout
        )
        self.worker_thread = QThread()
        self.worker = ApiWorker(
            self.client,
            radius_km=self.config.search_radius_km,
            limit=self.config.search_limit,
        )
        self.worker.moveToThread(self.worker_thread)
        self.worker.operation_started.connect(self.update_status_message)
        self.worker.operation_finished.connect(self.update_status_message)
        self.worker_thread.start()

    def _init_widgets(self) -> None:
        """Creates the map, the results dock and the controller."""
        self.map_view = LeafletMapView(self)
        self.setCentralWidget(self.map_view)

        self.nearby_list = NearbyListWidget()
        self.list_dock = QDockWidget("Nearby", self)
        self.list_dock.setObjectName("NearbyDock")
        self.list_dock.setWidget(self.nearby_list)
        self.addDockWidget(Qt.LeftDockWidgetArea, self.list_dock)

        self.scheduler = QtScheduler(self)
        self.controller = MapController(
            self.map_view, self.scheduler, self.worker, parent=self
        )

    def _connect_signals(self) -> None:
        self.controller.notice.connect(self.update_status_message)
        self.controller.results_changed.connect(self.nearby_list.set_results)
        self.controller.image_requested.connect(self.show_image_dialog)
        self.controller.image_loaded.connect(self._on_image_loaded)
        self.controller.image_failed.connect(self._on_image_failed)
        self.controller.coordinate_picked.connect(self._on_coordinate_picked)
        self.controller.contribution_succeeded.connect(self._on_contribution_succeeded)
        self.controller.contribution_failed.connect(self._on_contribution_failed)

        self.nearby_list.trashcan_selected.connect(self.controller.focus)
        self.nearby_list.refresh_requested.connect(self.controller.search)
        self.nearby_list.contribute_requested.connect(self.show_contribution_dialog)

    def _restore_geometry(self) -> None:
        settings = QSettings(WINDOW_SETTINGS_KEY, WINDOW_SETTINGS_APP)
        geometry = settings.value("geometry")
        if geometry:
            self.restoreGeometry(geometry)
        state = settings.value("windowState")
        if state:
            self.restoreState(state)

    # ----------------------------------------------------------------------
    # Status bar
    # ----------------------------------------------------------------------

    @Slot(str)
    def update_status_message(self, message: str) -> None:
        """
        Shows a message in the status bar.

        Args:
            message (str): The message to display.
        """
        self.statusBar().showMessage(message, 5000)

    # ----------------------------------------------------------------------
    # Image viewer
    # ----------------------------------------------------------------------

    @Slot(str)
    def show_image_dialog(self, url: str) -> None:
        """Opens the viewer; the image arrives later from the worker."""
        self._image_dialog = ImageViewerDialog(self, url=url)
        self._image_dialog.finished.connect(self._on_image_dialog_closed)
        self._image_dialog.open()

    def _on_image_dialog_closed(self, _result: int) -> None:
        self._image_dialog = None

    @Slot(str, object)
    def _on_image_loaded(self, url: str, data: bytes) -> None:
        if self._image_dialog is not None and self._image_dialog.url == url:
            self._image_dialog.set_image_data(data)

    @Slot(str, str)
    def _on_image_failed(self, url: str, message: str) -> None:
        logger.warning(f"Image {url} failed: {message}")
        if self._image_dialog is not None and self._image_dialog.url == url:
            self._image_dialog.show_error(message)

    # ----------------------------------------------------------------------
    # Contribution
    # ----------------------------------------------------------------------

    @Slot()
    def show_contribution_dialog(self) -> None:
        """Opens the contribution form, prefilled from the held draft."""
        if self._contribution_dialog is None:
            dialog = ContributionDialog(self)
            dialog.pick_toggled.connect(self._on_pick_toggled)
            dialog.submit_requested.connect(self._on_submit_requested)
            dialog.finished.connect(self._on_contribution_dialog_closed)
            self._contribution_dialog = dialog

        self._contribution_dialog.load_draft(self.controller.draft)
        self._contribution_dialog.show()
        self._contribution_dialog.raise_()

    def _on_pick_toggled(self, checked: bool) -> None:
        if checked:
            self.controller.begin_pick()
        else:
            self.controller.end_pick()

    def _on_submit_requested(self, draft) -> None:
        self._contribution_dialog.set_busy(True)
        self.controller.submit(draft)

    def _on_coordinate_picked(self, lat: float, lng: float) -> None:
        if self._contribution_dialog is not None:
            self._contribution_dialog.set_location(lat, lng)

    def _on_contribution_succeeded(self, record: object) -> None:
        if self._contribution_dialog is not None:
            self._contribution_dialog.set_busy(False)
            self._contribution_dialog.set_picking(False)
            self._contribution_dialog.load_draft(self.controller.draft)
            self._contribution_dialog.accept()

    def _on_contribution_failed(self, message: str) -> None:
        if self._contribution_dialog is not None:
            self._contribution_dialog.set_busy(False)
            self._contribution_dialog.show_error(message)

    def _on_contribution_dialog_closed(self, _result: int) -> None:
        if self._contribution_dialog is not None:
            self.controller.draft = self._contribution_dialog.draft()
            self._contribution_dialog.set_picking(False)
        self.controller.end_pick()

    # ----------------------------------------------------------------------
    # Shutdown
    # ----------------------------------------------------------------------

    def closeEvent(self, event: QCloseEvent) -> None:
        """
        Handles application close event.
        Saves window geometry/state and strictly cleans up worker thread.
        """
        settings = QSettings(WINDOW_SETTINGS_KEY, WINDOW_SETTINGS_APP)
        settings.setValue("geometry", self.saveGeometry())
        settings.setValue("windowState", self.saveState())

        self.controller.shutdown()

        self.worker_thread.quit()
        if not self.worker_thread.wait(2000):
            logger.warning("Worker thread did not quit in time. Terminating...")
            self.worker_thread.terminate()
            self.worker_thread.wait()

        self.client.close()
        event.accept()
