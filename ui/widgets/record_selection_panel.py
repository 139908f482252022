"""
Record Selection Panel.

Lists the active patient's medicines and appointments with check boxes
so the user can choose what goes into the next QR export.
"""

from typing import Iterable, Set

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel,
    QGroupBox, QListWidget, QListWidgetItem, QPushButton
)
from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QFont

from core.models.records import Appointment, Medicine, RecordKind


class RecordSelectionPanel(QWidget):
    """
    Widget with one checkable list per record kind.

    Signals carry record ids; the panel keeps no selection state of
    its own beyond the check marks.
    """

    medicineToggled = Signal(int)
    appointmentToggled = Signal(int)
    selectAllRequested = Signal(str)
    deselectAllRequested = Signal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._updating = False
        self._initUi()

    def _initUi(self) -> None:
        """Initialize the user interface."""
        layout = QVBoxLayout(self)
        layout.setContentsMargins(5, 5, 5, 5)
        layout.setSpacing(5)

        titleLabel = QLabel("Records to export")
        titleLabel.setFont(QFont("Arial", 12, QFont.Weight.Bold))
        titleLabel.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(titleLabel)

        self._medicineList = self._createGroup(layout, "Medicines", RecordKind.MEDICINE)
        self._appointmentList = self._createGroup(layout, "Appointments", RecordKind.APPOINTMENT)

        self._medicineList.itemChanged.connect(
            lambda item: self._onItemChanged(item, self.medicineToggled)
        )
        self._appointmentList.itemChanged.connect(
            lambda item: self._onItemChanged(item, self.appointmentToggled)
        )

    def _createGroup(self, layout: QVBoxLayout, title: str, kind: RecordKind) -> QListWidget:
        group = QGroupBox(title)
        groupLayout = QVBoxLayout(group)
        groupLayout.setSpacing(4)

        buttonRow = QHBoxLayout()
        selectButton = QPushButton("Select all")
        deselectButton = QPushButton("Deselect all")
        selectButton.clicked.connect(lambda: self.selectAllRequested.emit(kind.value))
        deselectButton.clicked.connect(lambda: self.deselectAllRequested.emit(kind.value))
        buttonRow.addWidget(selectButton)
        buttonRow.addWidget(deselectButton)
        groupLayout.addLayout(buttonRow)

        listWidget = QListWidget()
        listWidget.setFont(QFont("Consolas", 10))
        groupLayout.addWidget(listWidget)

        layout.addWidget(group)
        return listWidget

    def _onItemChanged(self, item: QListWidgetItem, signal) -> None:
        if self._updating:
            return
        signal.emit(item.data(Qt.ItemDataRole.UserRole))

    @staticmethod
    def _medicineText(medicine: Medicine) -> str:
        return f"{medicine.name} · {medicine.dose} · {', '.join(medicine.times)}"

    @staticmethod
    def _appointmentText(appointment: Appointment) -> str:
        text = f"{appointment.doctor} · {appointment.date} {appointment.time}"
        if appointment.location:
            text += f" · {appointment.location}"
        return text

    def _fill(self, listWidget: QListWidget, items, selected: Set[int], toText) -> None:
        self._updating = True
        try:
            listWidget.clear()
            if not items:
                placeholder = QListWidgetItem("No records")
                placeholder.setFlags(Qt.ItemFlag.NoItemFlags)
                listWidget.addItem(placeholder)
                return
            for record in items:
                item = QListWidgetItem(toText(record))
                item.setData(Qt.ItemDataRole.UserRole, record.id)
                item.setFlags(item.flags() | Qt.ItemFlag.ItemIsUserCheckable)
                item.setCheckState(
                    Qt.CheckState.Checked if record.id in selected else Qt.CheckState.Unchecked
                )
                listWidget.addItem(item)
        finally:
            self._updating = False

    def updateRecords(
        self,
        medicines: Iterable[Medicine],
        appointments: Iterable[Appointment],
        selectedMedicines: Set[int],
        selectedAppointments: Set[int]
    ) -> None:
        """
        Redraw both lists.

        Args:
            medicines: Medicines of the active patient.
            appointments: Appointments of the active patient.
            selectedMedicines: Ids to show checked.
            selectedAppointments: Ids to show checked.
        """
        self._fill(self._medicineList, list(medicines), selectedMedicines, self._medicineText)
        self._fill(
            self._appointmentList, list(appointments), selectedAppointments, self._appointmentText
        )
