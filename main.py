# main.py
import sys
from PyQt6.QtWidgets import QApplication, QDialog
from PyQt6.QtCore import QLoggingCategory

from staffacademy.config import ConfigManager, LOG_FORMAT, LOG_LEVEL, load_access_keys
from staffacademy.gate import AccessGate
from staffacademy.utils import setup_logging
from staffacademy.ui.gate_dialog import GateDialog
from staffacademy.ui.main_window import MainWindow


def main():
    # suppress Qt paint/font warnings
    QLoggingCategory.setFilterRules(
        "qt.qpa.*=false\n"
        "qt.text.font.db=false"
    )
    logger = setup_logging(level=LOG_LEVEL, format_string=LOG_FORMAT)
    app = QApplication(sys.argv)
    app.setApplicationName("StaffAcademy")

    config = ConfigManager()
    config.load()

    gate = AccessGate(config, load_access_keys())
    if not gate.is_unlocked():
        if GateDialog(gate).exec() != QDialog.DialogCode.Accepted:
            logger.info("Access gate dismissed, exiting")
            sys.exit(0)

    window = MainWindow(config)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
