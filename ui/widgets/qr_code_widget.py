"""
QR Code Widget

Widget for displaying a generated QR code with a short summary.
"""

import logging
from typing import Optional
import numpy as np
import cv2

from PySide6.QtCore import Qt
from PySide6.QtGui import QImage, QPixmap
from PySide6.QtWidgets import QWidget, QLabel, QVBoxLayout, QGroupBox


logger = logging.getLogger(__name__)


class QrCodeWidget(QWidget):
    """
    Widget for displaying the exported QR code.

    Features:
    - Scales the code to the display size without smoothing, so
      modules stay crisp
    - Placeholder text when no code has been generated
    """

    def __init__(self, parent=None, displaySize: int = 300):
        """
        Initialize QrCodeWidget.

        Args:
            parent: Parent widget.
            displaySize: Side length of the displayed code in pixels.
        """
        super().__init__(parent)

        self._displaySize = displaySize
        self._currentImage: Optional[np.ndarray] = None

        self._setupUI()

    def _setupUI(self):
        """Setup the widget UI."""
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(5)

        groupBox = QGroupBox("QR Code")
        groupLayout = QVBoxLayout(groupBox)
        groupLayout.setContentsMargins(5, 10, 5, 5)

        self._imageLabel = QLabel()
        self._imageLabel.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._imageLabel.setMinimumSize(self._displaySize, self._displaySize)
        self._imageLabel.setStyleSheet("""
            QLabel {
                background-color: #1a1a1a;
                border: 1px solid #444444;
                border-radius: 5px;
                color: #666666;
                font-size: 11px;
            }
        """)

        self._summaryLabel = QLabel("")
        self._summaryLabel.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._summaryLabel.setStyleSheet("color: #888888; font-size: 11px;")

        self._showPlaceholder()

        groupLayout.addWidget(self._imageLabel)
        groupLayout.addWidget(self._summaryLabel)
        layout.addWidget(groupBox)

    def _showPlaceholder(self):
        self._imageLabel.setText("Select records and generate a QR code")
        self._imageLabel.setPixmap(QPixmap())
        self._summaryLabel.setText("")

    def updateImage(self, image: np.ndarray, summary: str = "") -> None:
        """
        Display a QR code.

        Args:
            image: QR image (grayscale or BGR).
            summary: Text shown under the code.
        """
        if image is None:
            self.clear()
            return

        self._currentImage = image.copy()

        gray = image if image.ndim == 2 else cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        displayImage = cv2.resize(
            gray,
            (self._displaySize, self._displaySize),
            interpolation=cv2.INTER_NEAREST
        )
        displayImage = np.ascontiguousarray(displayImage)

        h, w = displayImage.shape
        qImage = QImage(displayImage.data, w, h, w, QImage.Format.Format_Grayscale8)

        # QImage does not own the buffer; copy before displayImage is freed
        self._imageLabel.setPixmap(QPixmap.fromImage(qImage.copy()))
        self._imageLabel.setText("")
        self._summaryLabel.setText(summary)

    def clear(self) -> None:
        """Clear the displayed code and show placeholder."""
        self._currentImage = None
        self._showPlaceholder()

    def getCurrentImage(self) -> Optional[np.ndarray]:
        """
        Get the currently displayed code.

        Returns:
            QR image as numpy array, or None if nothing is displayed.
        """
        return self._currentImage.copy() if self._currentImage is not None else None
