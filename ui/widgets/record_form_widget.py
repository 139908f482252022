"""
Record Form Widget.

Form for one Medicine or Appointment. Imported single records are
staged here for review; nothing is stored until the user saves.
"""

from typing import Any, Dict

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QLabel, QGroupBox,
    QGridLayout, QLineEdit, QPushButton
)
from PySide6.QtCore import Qt, Signal, Slot
from PySide6.QtGui import QFont

from core.models.records import RecordKind


# (field name, label, placeholder)
FORM_FIELDS = {
    RecordKind.MEDICINE: [
        ("name", "Name:", "Paracetamol"),
        ("dose", "Dose:", "500mg"),
        ("startDate", "Start date:", "YYYY-MM-DD"),
        ("endDate", "End date:", "YYYY-MM-DD (optional)"),
        ("times", "Times:", "08:00, 20:00"),
        ("notes", "Notes:", ""),
    ],
    RecordKind.APPOINTMENT: [
        ("doctor", "Doctor:", "Dr. Pérez"),
        ("date", "Date:", "YYYY-MM-DD"),
        ("time", "Time:", "HH:MM"),
        ("location", "Location:", ""),
        ("notes", "Notes:", ""),
    ],
}


class RecordFormWidget(QWidget):
    """
    Editable form for one record kind.

    Emits saveRequested(kind value, raw record) when the user saves.
    """

    saveRequested = Signal(str, object)

    def __init__(self, kind: RecordKind, parent=None):
        super().__init__(parent)
        self._kind = RecordKind(kind)
        self._inputs: Dict[str, QLineEdit] = {}
        self._initUi()

    @property
    def kind(self) -> RecordKind:
        return self._kind

    def _initUi(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(5, 5, 5, 5)
        layout.setSpacing(5)

        title = "New medicine" if self._kind == RecordKind.MEDICINE else "New appointment"
        titleLabel = QLabel(title)
        titleLabel.setFont(QFont("Arial", 12, QFont.Weight.Bold))
        titleLabel.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(titleLabel)

        group = QGroupBox("Details")
        grid = QGridLayout(group)
        grid.setSpacing(4)
        for row, (name, label, placeholder) in enumerate(FORM_FIELDS[self._kind]):
            lineEdit = QLineEdit()
            lineEdit.setPlaceholderText(placeholder)
            grid.addWidget(QLabel(label), row, 0)
            grid.addWidget(lineEdit, row, 1)
            self._inputs[name] = lineEdit
        layout.addWidget(group)

        self._errorLabel = QLabel("")
        self._errorLabel.setWordWrap(True)
        self._errorLabel.setStyleSheet("color: #ffc107;")
        layout.addWidget(self._errorLabel)

        saveButton = QPushButton("Save")
        saveButton.setMinimumHeight(36)
        saveButton.clicked.connect(self._onSave)
        layout.addWidget(saveButton)

        layout.addStretch()

    def fill(self, record: Dict[str, Any]) -> None:
        """
        Pre-fill the form from a raw record.

        Unknown fields are ignored; missing ones are cleared.
        """
        self.clear()
        for name, lineEdit in self._inputs.items():
            value = record.get(name)
            if value is None:
                continue
            if name == "times" and isinstance(value, list):
                value = ", ".join(str(t) for t in value)
            lineEdit.setText(str(value))

    def values(self) -> Dict[str, Any]:
        """Read the form as a raw record."""
        data: Dict[str, Any] = {}
        for name, lineEdit in self._inputs.items():
            text = lineEdit.text().strip()
            if name == "times":
                data[name] = [t.strip() for t in text.split(",") if t.strip()]
            elif name == "endDate":
                data[name] = text or None
            else:
                data[name] = text
        return data

    @Slot()
    def clear(self) -> None:
        for lineEdit in self._inputs.values():
            lineEdit.clear()
        self._errorLabel.setText("")

    @Slot(str)
    def showError(self, message: str) -> None:
        self._errorLabel.setText(f"⚠ {message}")

    def _onSave(self) -> None:
        self._errorLabel.setText("")
        self.saveRequested.emit(self._kind.value, self.values())
