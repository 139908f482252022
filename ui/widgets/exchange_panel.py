"""
Exchange Panel Widget

Panel containing patient selection, QR export/import buttons and
debug control.
"""

from typing import List, Optional

from PySide6.QtCore import Signal
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel,
    QComboBox, QCheckBox, QPushButton, QGroupBox
)


def _buttonStyle(color: str, hover: str, pressed: str) -> str:
    return f"""
        QPushButton {{
            background-color: {color};
            color: white;
            border: none;
            border-radius: 5px;
            font-size: 14px;
            font-weight: bold;
        }}
        QPushButton:hover {{
            background-color: {hover};
        }}
        QPushButton:pressed {{
            background-color: {pressed};
        }}
        QPushButton:disabled {{
            background-color: #cccccc;
        }}
    """


class ExchangePanel(QWidget):
    """
    Exchange control panel.

    Contains the patient selector (caregivers only), export and import
    buttons, debug mode and close button.
    """

    # Signals
    patientChanged = Signal(int)
    generateRequested = Signal()
    saveRequested = Signal()
    importRequested = Signal()
    cancelRequested = Signal()
    debugToggled = Signal(bool)
    closeRequested = Signal()

    def __init__(self, parent=None):
        """Initialize ExchangePanel."""
        super().__init__(parent)
        self._setupUI()

    def _setupUI(self):
        """Setup the panel UI."""
        layout = QVBoxLayout(self)
        layout.setSpacing(15)

        # Patient Group
        patientGroup = QGroupBox("Patient")
        patientLayout = QVBoxLayout(patientGroup)

        self._userLabel = QLabel("Not logged in")
        patientLayout.addWidget(self._userLabel)

        self._patientCombo = QComboBox()
        self._patientCombo.currentIndexChanged.connect(self._onPatientChanged)
        patientLayout.addWidget(self._patientCombo)

        layout.addWidget(patientGroup)

        # Export Group
        exportGroup = QGroupBox("Export")
        exportLayout = QVBoxLayout(exportGroup)

        self._generateButton = QPushButton("Generate QR")
        self._generateButton.setMinimumHeight(40)
        self._generateButton.setStyleSheet(_buttonStyle("#4CAF50", "#45a049", "#3d8b40"))
        self._generateButton.clicked.connect(self.generateRequested)
        exportLayout.addWidget(self._generateButton)

        self._saveButton = QPushButton("Download QR")
        self._saveButton.setMinimumHeight(32)
        self._saveButton.setEnabled(False)
        self._saveButton.clicked.connect(self.saveRequested)
        exportLayout.addWidget(self._saveButton)

        layout.addWidget(exportGroup)

        # Import Group
        importGroup = QGroupBox("Import")
        importLayout = QVBoxLayout(importGroup)

        self._importButton = QPushButton("Upload QR image")
        self._importButton.setMinimumHeight(40)
        self._importButton.setStyleSheet(_buttonStyle("#2196F3", "#1e88e5", "#1565c0"))
        self._importButton.clicked.connect(self.importRequested)
        importLayout.addWidget(self._importButton)

        self._cancelButton = QPushButton("Cancel")
        self._cancelButton.setMinimumHeight(32)
        self._cancelButton.clicked.connect(self.cancelRequested)
        importLayout.addWidget(self._cancelButton)

        self._stateLabel = QLabel("")
        self._stateLabel.setStyleSheet("color: #888888;")
        importLayout.addWidget(self._stateLabel)

        layout.addWidget(importGroup)

        # Debug Mode
        debugRow = QHBoxLayout()
        self._debugCheck = QCheckBox("Debug Mode")
        self._debugCheck.toggled.connect(self.debugToggled)
        debugRow.addWidget(self._debugCheck)
        debugRow.addStretch()
        layout.addLayout(debugRow)

        # Close Button
        self._closeButton = QPushButton("✕ Close")
        self._closeButton.setMinimumHeight(40)
        self._closeButton.setStyleSheet(_buttonStyle("#f44336", "#da190b", "#b71c1c"))
        self._closeButton.clicked.connect(self.closeRequested)
        layout.addWidget(self._closeButton)

        layout.addStretch()

    def _onPatientChanged(self, index: int):
        """Handle patient selection change."""
        if index >= 0:
            data = self._patientCombo.currentData()
            if data is not None and data >= 0:
                self.patientChanged.emit(data)

    def updateSession(
        self,
        userName: Optional[str],
        patientIds: List[int],
        selectedPatientId: Optional[int],
        isCaregiver: bool
    ):
        """
        Show the logged-in user and the patients they may act for.

        Args:
            userName: Display name, None when logged out.
            patientIds: Associated patients (caregiver) or the user itself.
            selectedPatientId: Currently active patient.
            isCaregiver: Whether the patient selector is shown.
        """
        self._userLabel.setText(userName or "Not logged in")

        self._patientCombo.blockSignals(True)
        self._patientCombo.clear()
        if not patientIds:
            self._patientCombo.addItem("No patients", -1)
        else:
            self._patientCombo.addItem("Select a patient", -1)
            for patientId in patientIds:
                self._patientCombo.addItem(f"Patient {patientId}", patientId)
            if selectedPatientId in patientIds:
                self._patientCombo.setCurrentIndex(patientIds.index(selectedPatientId) + 1)
        self._patientCombo.blockSignals(False)
        self._patientCombo.setVisible(isCaregiver)

    def setSaveEnabled(self, enabled: bool):
        """Enable or disable the download button."""
        self._saveButton.setEnabled(enabled)

    def setImportBusy(self, busy: bool, stateText: str = ""):
        """Disable import while a pipeline is running."""
        self._importButton.setEnabled(not busy)
        self._stateLabel.setText(stateText)

    def setDebugEnabled(self, enabled: bool):
        """Set debug check box state."""
        self._debugCheck.setChecked(enabled)

    def isDebugEnabled(self) -> bool:
        """Get debug check box state."""
        return self._debugCheck.isChecked()
