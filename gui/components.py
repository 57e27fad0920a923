# Copyright (c) 2026 Stephen P Smith
# MIT License

import datetime
import html
import logging
from typing import List, Optional

from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QLabel, QLineEdit, QPlainTextEdit,
    QDialogButtonBox, QMessageBox, QTreeWidgetItem, QTextEdit, QPushButton
)
from PySide6.QtCore import Qt, QSettings
from PySide6.QtGui import QFont

from fat_backend.config import MAX_BLOCK
from fat_backend.directory import validate_name
from fat_backend.errors import ValidationError
from fat_backend.handler import IntegrityReport
from fat_backend.models import DirectoryEntry

logger = logging.getLogger(__name__)

DISPLAY_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_timestamp(dt: Optional[datetime.datetime]) -> str:
    """Format a timestamp for the file list ('' when missing)"""
    if dt is None:
        return ""
    return dt.strftime(DISPLAY_TIME_FORMAT)


def format_size(size_chars: int) -> str:
    return f"{size_chars:,} chars" if size_chars != 1 else "1 char"


def entry_row(entry: DirectoryEntry, trashed: bool) -> List[str]:
    """
    Column texts for one file in the list.

    The active view shows Name, Size, Created, Modified; the recycle bin view
    replaces Created with Deleted.
    """
    third = entry.deleted_at if trashed else entry.created_at
    return [
        entry.name,
        format_size(entry.size_chars),
        format_timestamp(third),
        format_timestamp(entry.modified_at),
    ]


def sort_keys(entry: DirectoryEntry, trashed: bool) -> list:
    """Per-column sort values matching entry_row"""
    third = entry.deleted_at if trashed else entry.created_at
    return [
        entry.name.lower(),
        entry.size_chars,
        third.timestamp() if third else 0.0,
        entry.modified_at.timestamp() if entry.modified_at else 0.0,
    ]


def format_integrity_report(report: IntegrityReport) -> str:
    """Plain-text rendering of an integrity report"""
    lines = [
        f"Files checked: {report.files_checked}",
        f"Block records found: {report.blocks_checked}",
        "",
    ]
    if report.is_clean:
        lines.append("No problems found.")
        return "\n".join(lines)

    if report.broken:
        lines.append("Broken files:")
        lines.extend(f"  {name}: {reason}" for name, reason in sorted(report.broken.items()))
        lines.append("")
    if report.size_mismatches:
        lines.append("Size does not match stored content:")
        lines.extend(f"  {name}" for name in report.size_mismatches)
        lines.append("")
    if report.orphans:
        lines.append("Orphaned block records:")
        lines.extend(f"  {name}" for name in report.orphans)
    return "\n".join(lines).rstrip()


def format_store_error(action: str, error: OSError) -> str:
    """Dialog text for an I/O error raised by the record store"""
    reason = error.strerror or str(error)
    if error.filename:
        return f"Failed to {action}:\n{reason}\n\nRecord: {error.filename}"
    return f"Failed to {action}:\n{reason}"


class SortableTreeWidgetItem(QTreeWidgetItem):
    """Tree item that sorts by the per-column values stored in UserRole"""
    def __lt__(self, other):
        tree = self.treeWidget()
        if tree is None:
            return self.text(0) < other.text(0)

        column = tree.sortColumn()
        if column == -1:
            column = 0

        my_data = self.data(column, Qt.ItemDataRole.UserRole + 1)
        other_data = other.data(column, Qt.ItemDataRole.UserRole + 1)
        if my_data is not None and other_data is not None:
            return my_data < other_data

        # Avoid super().__lt__ to prevent potential C++ segfaults
        return self.text(column) < other.text(column)


class FileEditorDialog(QDialog):
    """Dialog for entering a file name and content (new file) or new content (edit)"""
    def __init__(self, parent=None, name: str = "", content: str = "", editing: bool = False):
        super().__init__(parent)
        self.editing = editing
        self.file_name = name
        self.content = content
        self.settings = QSettings('FATManager', 'Settings')
        self.setWindowTitle(f"Edit '{name}'" if editing else "New File")
        self.resize(560, 420)
        self.setup_ui()

    def setup_ui(self):
        layout = QVBoxLayout(self)

        layout.addWidget(QLabel("File name:"))
        self.name_input = QLineEdit()
        self.name_input.setText(self.file_name)
        self.name_input.setPlaceholderText("notes")
        self.name_input.setReadOnly(self.editing)
        layout.addWidget(self.name_input)

        layout.addWidget(QLabel("Content:"))
        self.content_edit = QPlainTextEdit()
        self.content_edit.setPlainText(self.content)
        font = QFont("Consolas")
        font.setStyleHint(QFont.StyleHint.Monospace)
        self.content_edit.setFont(font)
        self.content_edit.textChanged.connect(self.update_counter)
        layout.addWidget(self.content_edit)

        self.counter_label = QLabel()
        layout.addWidget(self.counter_label)
        self.update_counter()

        btns = QDialogButtonBox(QDialogButtonBox.StandardButton.Save | QDialogButtonBox.StandardButton.Cancel)
        btns.accepted.connect(self.validate)
        btns.rejected.connect(self.reject)
        layout.addWidget(btns)

        if self.editing:
            self.content_edit.setFocus()
        else:
            self.name_input.setFocus()

    def update_counter(self):
        length = len(self.content_edit.toPlainText())
        blocks = (length + MAX_BLOCK - 1) // MAX_BLOCK
        self.counter_label.setText(f"{length} chars, {blocks} block(s)")

    def validate(self):
        name = self.name_input.text()
        if not self.editing:
            try:
                validate_name(name)
            except ValidationError as e:
                logger.warning(f"Invalid file name provided: {name!r} ({e})")
                QMessageBox.warning(self, "Invalid Name", str(e))
                return

        if self.editing and self.settings.value('confirm_save', True, type=bool):
            response = QMessageBox.question(
                self,
                "Confirm Save",
                f"Save the changes to '{name}'?",
                QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
            )
            if response == QMessageBox.StandardButton.No:
                return

        self.file_name = name
        self.content = self.content_edit.toPlainText()
        self.accept()


class FileViewerDialog(QDialog):
    """Read-only view of a file's metadata and content"""
    def __init__(self, entry: DirectoryEntry, content: str, parent=None):
        super().__init__(parent)
        self.entry = entry
        self.setWindowTitle(f"{entry.name}")
        self.resize(560, 420)
        logger.debug(f"Opening viewer for '{entry.name}'")

        layout = QVBoxLayout(self)

        info = (f"<b>{html.escape(entry.name)}</b> &nbsp; {format_size(entry.size_chars)}<br>"
                f"Created: {format_timestamp(entry.created_at)} &nbsp; "
                f"Modified: {format_timestamp(entry.modified_at)}")
        if entry.in_trash:
            info += f"<br>Deleted: {format_timestamp(entry.deleted_at)}"
        layout.addWidget(QLabel(info))

        self.text_edit = QPlainTextEdit()
        self.text_edit.setReadOnly(True)
        self.text_edit.setPlainText(content)
        layout.addWidget(self.text_edit)

        btn_layout = QHBoxLayout()
        btn_layout.addStretch()
        close_btn = QPushButton("Close")
        close_btn.clicked.connect(self.accept)
        btn_layout.addWidget(close_btn)
        layout.addLayout(btn_layout)


class IntegrityReportDialog(QDialog):
    """Shows the outcome of a store integrity check"""
    def __init__(self, report: IntegrityReport, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Integrity Check")
        self.resize(600, 400)

        layout = QVBoxLayout(self)
        text = QTextEdit()
        text.setReadOnly(True)
        text.setPlainText(format_integrity_report(report))
        layout.addWidget(text)

        btns = QDialogButtonBox(QDialogButtonBox.StandardButton.Close)
        btns.rejected.connect(self.reject)
        layout.addWidget(btns)
