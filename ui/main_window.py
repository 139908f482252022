"""
Main Window

Main application window containing all UI components.
Connects the widgets to the QR exchange controller provided by
ExchangeOrchestrator.
"""

import logging
from datetime import date
from typing import Any, Dict, Optional, TYPE_CHECKING

from PySide6.QtCore import QObject, QRunnable, QThreadPool, QTimer, Signal
from PySide6.QtWidgets import (
    QMainWindow, QWidget, QHBoxLayout, QStackedWidget,
    QStatusBar, QMessageBox, QFileDialog
)

from core.errors import QrExchangeError, RecordValidationFailure
from core.models.records import Appointment, RecordKind, recordFromDict
from services.interfaces.image_decoder_service_interface import ImageSource
from services.interfaces.import_reconciler_service_interface import ActiveView
from services.interfaces.qr_export_service_interface import QrExportResult
from ui.qr_exchange_controller import ControllerState, QrExchangeController
from ui.widgets.exchange_panel import ExchangePanel
from ui.widgets.qr_code_widget import QrCodeWidget
from ui.widgets.record_form_widget import RecordFormWidget
from ui.widgets.record_selection_panel import RecordSelectionPanel

if TYPE_CHECKING:
    from ui.exchange_orchestrator import ExchangeOrchestrator


logger = logging.getLogger(__name__)


IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.gif *.webp *.bmp)"


class DecodeSignals(QObject):
    """Carries a decode result back to the GUI thread."""
    finished = Signal(int, object)


class DecodeWorker(QRunnable):
    """
    Runs image decoding on the thread pool.

    Only the decoder runs here; the result is handed to the controller
    on the GUI thread through DecodeSignals.finished.
    """

    def __init__(self, controller: QrExchangeController, imageData: ImageSource, ticket: int):
        super().__init__()
        self._controller = controller
        self._imageData = imageData
        self._ticket = ticket
        self.signals = DecodeSignals()

    def run(self):
        result = self._controller.decode(self._imageData, self._ticket)
        self.signals.finished.emit(self._ticket, result)


class MainWindow(QMainWindow):
    """
    Main application window.

    Left: record selection. Center: QR code or a record form.
    Right: patient, export and import controls.
    """

    PAGE_QR = 0
    PAGE_MEDICINE_FORM = 1
    PAGE_APPOINTMENT_FORM = 2

    def __init__(self, orchestrator: "ExchangeOrchestrator"):
        """
        Initialize MainWindow.

        Args:
            orchestrator: Exchange orchestrator containing all services.
        """
        super().__init__()

        self._orchestrator = orchestrator
        self._configService = orchestrator.configService
        self._sessionService = orchestrator.sessionService
        self._recordStore = orchestrator.recordStore
        self._controller = orchestrator.controller

        self._threadPool = QThreadPool.globalInstance()
        self._lastExport: Optional[QrExportResult] = None

        self._setupUI()
        self._setupConnections()
        self._loadInitialState()

    def _setupUI(self):
        """Setup the main window UI."""
        self.setWindowTitle("Medical Records · QR Exchange")
        self.setMinimumSize(
            self._configService.getWindowMinWidth(),
            self._configService.getWindowMinHeight()
        )

        centralWidget = QWidget()
        self.setCentralWidget(centralWidget)

        mainLayout = QHBoxLayout(centralWidget)
        mainLayout.setContentsMargins(10, 10, 10, 10)
        mainLayout.setSpacing(10)

        self._selectionPanel = RecordSelectionPanel()
        self._selectionPanel.setFixedWidth(300)
        mainLayout.addWidget(self._selectionPanel, stretch=0)

        # Center: QR code and the two record forms
        self._centerStack = QStackedWidget()
        self._qrCodeWidget = QrCodeWidget(displaySize=self._configService.getQrDisplaySize())
        self._medicineForm = RecordFormWidget(RecordKind.MEDICINE)
        self._appointmentForm = RecordFormWidget(RecordKind.APPOINTMENT)
        self._centerStack.addWidget(self._qrCodeWidget)
        self._centerStack.addWidget(self._medicineForm)
        self._centerStack.addWidget(self._appointmentForm)
        mainLayout.addWidget(self._centerStack, stretch=3)

        self._exchangePanel = ExchangePanel()
        self._exchangePanel.setFixedWidth(250)
        mainLayout.addWidget(self._exchangePanel, stretch=0)

        self._statusBar = QStatusBar()
        self.setStatusBar(self._statusBar)
        self._statusBar.showMessage("Ready")

        self._applyTheme()

    def _applyTheme(self):
        """Apply dark theme to the application."""
        self.setStyleSheet("""
            QMainWindow {
                background-color: #2b2b2b;
            }
            QWidget {
                background-color: #2b2b2b;
                color: #ffffff;
            }
            QGroupBox {
                border: 1px solid #444444;
                border-radius: 5px;
                margin-top: 10px;
                padding-top: 10px;
            }
            QGroupBox::title {
                subcontrol-origin: margin;
                subcontrol-position: top left;
                padding: 0 5px;
            }
            QComboBox, QLineEdit, QListWidget {
                background-color: #3c3c3c;
                border: 1px solid #555555;
                border-radius: 3px;
                padding: 5px;
            }
            QStatusBar {
                background-color: #1e1e1e;
                color: #888888;
            }
            QLabel {
                color: #ffffff;
            }
        """)

    def _setupConnections(self):
        """Setup signal/slot connections and controller callbacks."""
        self._selectionPanel.medicineToggled.connect(self._controller.toggleMedicine)
        self._selectionPanel.appointmentToggled.connect(self._controller.toggleAppointment)
        self._selectionPanel.selectAllRequested.connect(self._onSelectAll)
        self._selectionPanel.deselectAllRequested.connect(self._onDeselectAll)

        self._exchangePanel.patientChanged.connect(self._onPatientChanged)
        self._exchangePanel.generateRequested.connect(self._onGenerateRequested)
        self._exchangePanel.saveRequested.connect(self._onSaveRequested)
        self._exchangePanel.importRequested.connect(self._onImportRequested)
        self._exchangePanel.cancelRequested.connect(self._onCancelRequested)
        self._exchangePanel.debugToggled.connect(self._orchestrator.setDebugEnabled)
        self._exchangePanel.closeRequested.connect(self.close)

        self._medicineForm.saveRequested.connect(self._onRecordSaveRequested)
        self._appointmentForm.saveRequested.connect(self._onRecordSaveRequested)

        self._controller.onMessage = self._onMessage
        self._controller.onConfirmationRequested = self._onConfirmationRequested
        self._controller.onStateChanged = self._onStateChanged

        self._orchestrator.setFormHandlers(self._fillForm, self._switchView)

    def _loadInitialState(self):
        """Load initial application state."""
        self._exchangePanel.setDebugEnabled(self._orchestrator.isDebugEnabled())
        self._refreshSession()
        self._refreshRecords()

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Session and record lists
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def _refreshSession(self):
        user = self._sessionService.currentUser()
        self._exchangePanel.updateSession(
            userName=user.name if user else None,
            patientIds=self._sessionService.associatedPatients(),
            selectedPatientId=self._sessionService.selectedPatientId,
            isCaregiver=bool(user and user.isCaregiver)
        )
        if user is None:
            self._statusBar.showMessage("No saved session: log in to exchange records")

    def _refreshRecords(self):
        selection = self._controller.selection
        self._selectionPanel.updateRecords(
            self._controller.records(RecordKind.MEDICINE),
            self._controller.records(RecordKind.APPOINTMENT),
            selection.medicines,
            selection.appointments
        )

    def _onPatientChanged(self, patientId: int):
        try:
            self._sessionService.selectPatient(patientId)
        except QrExchangeError as e:
            self._onMessage(e.userMessage, True)
            return
        self._controller.cancel()
        self._lastExport = None
        self._qrCodeWidget.clear()
        self._exchangePanel.setSaveEnabled(False)
        self._refreshRecords()
        self._statusBar.showMessage(f"Acting for patient {patientId}")

    def _onSelectAll(self, kindValue: str):
        self._controller.selectAll(RecordKind(kindValue))
        self._refreshRecords()

    def _onDeselectAll(self, kindValue: str):
        self._controller.deselectAll(RecordKind(kindValue))
        self._refreshRecords()

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Export
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def _onGenerateRequested(self):
        result = self._controller.generateQr()
        if result is None:
            return

        self._lastExport = result
        self._qrCodeWidget.updateImage(
            result.image,
            f"{result.medicinesCount} medicine(s) · {result.appointmentsCount} "
            f"appointment(s) · version {result.qrVersion}"
        )
        self._centerStack.setCurrentIndex(self.PAGE_QR)
        self._exchangePanel.setSaveEnabled(True)
        self._refreshRecords()

    def _onSaveRequested(self):
        if self._lastExport is None:
            return
        filepath, _ = QFileDialog.getSaveFileName(
            self,
            "Save QR code",
            self._orchestrator.qrExportService.defaultPath,
            "PNG image (*.png)"
        )
        if filepath:
            self._controller.saveQr(self._lastExport, filepath)

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Import
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def _onImportRequested(self):
        filepath, _ = QFileDialog.getOpenFileName(self, "Select QR image", "", IMAGE_FILTER)
        if not filepath:
            return

        ticket = self._controller.beginImport()
        worker = DecodeWorker(self._controller, filepath, ticket)
        worker.signals.finished.connect(self._onDecodeFinished)
        self._threadPool.start(worker)
        logger.info(f"[ticket {ticket}] Decoding {filepath}")

    def _onDecodeFinished(self, ticket: int, result: Any):
        self._controller.completeImport(ticket, result)

    def _onConfirmationRequested(self, prompt: str):
        # Ask after the current signal handler has returned
        QTimer.singleShot(0, lambda: self._askConfirmation(prompt))

    def _askConfirmation(self, prompt: str):
        if self._controller.state != ControllerState.AWAITING_CONFIRMATION:
            return
        answer = QMessageBox.question(
            self,
            "Import QR data",
            prompt,
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
        )
        self._controller.confirmImport(answer == QMessageBox.StandardButton.Yes)
        self._refreshRecords()

    def _onCancelRequested(self):
        self._controller.cancel()
        self._refreshRecords()
        self._statusBar.showMessage("Cancelled")

    def _onStateChanged(self, state: ControllerState):
        busy = state != ControllerState.IDLE
        stateText = {
            ControllerState.DECODING: "Reading QR code...",
            ControllerState.AWAITING_CONFIRMATION: "Waiting for confirmation",
        }.get(state, "")
        self._exchangePanel.setImportBusy(busy, stateText)

    def _onMessage(self, text: str, isError: bool):
        self._statusBar.showMessage(text.replace("\n", " "))
        if isError:
            QMessageBox.warning(self, "QR Exchange", text)

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Form hooks
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def _fillForm(self, kind: RecordKind, record: Dict[str, Any]):
        form = self._medicineForm if kind == RecordKind.MEDICINE else self._appointmentForm
        form.fill(record)

    def _switchView(self, view: ActiveView):
        if view == ActiveView.MEDICINE_FORM:
            self._centerStack.setCurrentIndex(self.PAGE_MEDICINE_FORM)
        else:
            self._centerStack.setCurrentIndex(self.PAGE_APPOINTMENT_FORM)

    def _onRecordSaveRequested(self, kindValue: str, data: Dict[str, Any]):
        kind = RecordKind(kindValue)
        form = self._medicineForm if kind == RecordKind.MEDICINE else self._appointmentForm
        try:
            context = self._sessionService.resolvePatientContext()
            record = recordFromDict(kind, data)
            if isinstance(record, Appointment):
                record.validate(today=date.today())
            else:
                record.validate()
        except RecordValidationFailure as e:
            form.showError(str(e))
            return
        except QrExchangeError as e:
            form.showError(e.userMessage)
            return

        try:
            stored = self._recordStore.createRecord(context.patientId, kind, record)
        except QrExchangeError as e:
            form.showError(e.userMessage)
            return
        logger.info(f"Saved {kind.value} {stored.id} for patient {context.patientId}")
        form.clear()
        self._centerStack.setCurrentIndex(self.PAGE_QR)
        self._refreshRecords()
        self._statusBar.showMessage(f"{kind.value.capitalize()} saved")

    def closeEvent(self, event):
        """Handle window close event."""
        self._controller.cancel()
        self._threadPool.waitForDone(2000)
        logger.info("Application closed")
        event.accept()
