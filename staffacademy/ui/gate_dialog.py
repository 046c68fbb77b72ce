# staffacademy/ui/gate_dialog.py

from PyQt6.QtWidgets import (
    QDialog, QLabel, QLineEdit, QMessageBox, QPushButton, QVBoxLayout
)
from PyQt6.QtCore import Qt, pyqtSlot

from staffacademy.gate import AccessGate


class GateDialog(QDialog):
    """Access-key prompt shown before the main window on first launch."""

    def __init__(self, gate: AccessGate, parent=None):
        super().__init__(parent)
        self.gate = gate
        self.setWindowTitle("StaffAcademy")
        self.setMinimumWidth(360)

        vbox = QVBoxLayout(self)
        vbox.setAlignment(Qt.AlignmentFlag.AlignCenter)

        title = QLabel("🔒 STAFF ACCESS")
        title.setStyleSheet("font-size: 18px; font-weight: 900;")
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        vbox.addWidget(title)

        prompt = QLabel("Enter your personal access key to continue.")
        prompt.setAlignment(Qt.AlignmentFlag.AlignCenter)
        vbox.addWidget(prompt)

        self.keyEdit = QLineEdit()
        self.keyEdit.setPlaceholderText("Enter your access key")
        self.keyEdit.setAlignment(Qt.AlignmentFlag.AlignCenter)
        vbox.addWidget(self.keyEdit)

        # default button, so Return in the key field unlocks too
        self.unlockBtn = QPushButton("Unlock")
        self.unlockBtn.setDefault(True)
        self.unlockBtn.clicked.connect(self.on_unlock)
        vbox.addWidget(self.unlockBtn)

        footer = QLabel("Authorized employees only.")
        footer.setAlignment(Qt.AlignmentFlag.AlignCenter)
        footer.setStyleSheet("color: gray; font-size: 11px;")
        vbox.addWidget(footer)

    @pyqtSlot()
    def on_unlock(self):
        if self.gate.unlock(self.keyEdit.text()):
            self.accept()
            return
        QMessageBox.warning(self, "Access Denied", "Incorrect access code.")
        self.keyEdit.selectAll()
        self.keyEdit.setFocus()
