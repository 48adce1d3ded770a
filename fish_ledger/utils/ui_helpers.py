from PySide6.QtWidgets import QWidget, QMessageBox


def info(parent: QWidget, title: str, text: str):
    QMessageBox.information(parent, title, text)

def error(parent: QWidget, title: str, text: str):
    QMessageBox.critical(parent, title, text)

def confirm(parent: QWidget, title: str, text: str) -> bool:
    """Yes/No warning prompt; True only when the user picks Yes."""
    answer = QMessageBox.warning(
        parent, title, text,
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No,
    )
    return answer == QMessageBox.Yes
