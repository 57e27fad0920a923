#!/usr/bin/env python3

# Copyright (c) 2026 Stephen P Smith
# MIT License

"""
FATManager
A desktop tool for managing files kept in a FAT-style record store
"""

import sys
import logging
from pathlib import Path
from typing import Optional

from PySide6.QtWidgets import (
    QApplication, QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
    QTreeWidget, QFileDialog, QMessageBox, QLabel, QStatusBar, QMenu,
    QToolBar, QStyle, QHeaderView, QLineEdit
)
from PySide6.QtCore import Qt, QSettings, QSize
from PySide6.QtGui import QAction, QKeySequence, QActionGroup

from fat_backend.config import (
    DUPLICATE_OVERWRITE, DUPLICATE_REJECT, RECORD_FORMAT_LEGACY, RECORD_FORMAT_NATIVE, FATConfig
)
from fat_backend.errors import FATCorruptionError, FATError
from fat_backend.handler import FileService, OperationResult
from fat_backend.record_store import DirectoryRecordStore

from gui.components import (
    FileEditorDialog, FileViewerDialog, IntegrityReportDialog,
    SortableTreeWidgetItem, entry_row, format_store_error, sort_keys
)
from gui.about import about_html


class FATManagerWindow(QMainWindow):
    """Main window for the FAT record store manager"""

    def setup_logging(self):
        """Configure application-wide logging"""
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s - %(filename)s:%(lineno)d - %(levelname)s - %(message)s',
            handlers=[
                logging.FileHandler("fatmanager.log", mode='w'),
                logging.StreamHandler()
            ]
        )
        self.logger = logging.getLogger("FATManager")

    def __init__(self, store_path: Optional[str] = None):
        super().__init__()

        # Settings
        self.settings = QSettings('FATManager', 'Settings')
        self.confirm_delete = self.settings.value('confirm_delete', True, type=bool)
        self.confirm_restore = self.settings.value('confirm_restore', True, type=bool)
        self.confirm_save = self.settings.value('confirm_save', True, type=bool)
        self.duplicate_policy = self.settings.value('duplicate_policy', DUPLICATE_OVERWRITE, type=str)
        self.allow_trashed_rewrite = self.settings.value('allow_trashed_rewrite', True, type=bool)
        self.record_format = self.settings.value('record_format', RECORD_FORMAT_NATIVE, type=str)

        self.setup_logging()
        self.logger.info("Application started")

        self.store_path = None
        self.service = None
        self.showing_trash = False

        self.setup_ui()
        self.restore_settings()
        self.table.header().setSortIndicator(0, Qt.SortOrder.AscendingOrder)

        if store_path:
            self.load_store(store_path)
        else:
            last_store = self.settings.value('last_store_path', '')
            if last_store and Path(last_store).is_dir():
                self.load_store(last_store)
            else:
                self.status_bar.showMessage("No store loaded. Open a folder to use as a record store.")

    def restore_settings(self):
        geometry = self.settings.value('window_geometry')
        if geometry:
            self.restoreGeometry(geometry)

        state = self.settings.value('window_state')
        if state:
            self.restoreState(state)

    def build_config(self) -> FATConfig:
        """Engine configuration from the current preferences"""
        policy = self.duplicate_policy if self.duplicate_policy in (DUPLICATE_OVERWRITE, DUPLICATE_REJECT) \
            else DUPLICATE_OVERWRITE
        if self.record_format == RECORD_FORMAT_LEGACY:
            return FATConfig.legacy(duplicate_policy=policy, allow_trashed_rewrite=self.allow_trashed_rewrite)
        return FATConfig(duplicate_policy=policy, allow_trashed_rewrite=self.allow_trashed_rewrite)

    def setup_ui(self):
        """Create the user interface"""
        self.setWindowTitle("FATManager")
        self.setGeometry(400, 200, 680, 480)
        self.setWindowIcon(self.style().standardIcon(QStyle.StandardPixmap.SP_DriveHDIcon))

        self.create_menus()
        self.create_toolbar()

        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        layout = QVBoxLayout(central_widget)

        # Search/Filter Bar
        search_layout = QHBoxLayout()
        search_label = QLabel("Filter:")
        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Search by file name...")
        self.search_input.setClearButtonEnabled(True)
        self.search_input.textChanged.connect(lambda _text: self.refresh_file_list())
        search_layout.addWidget(search_label)
        search_layout.addWidget(self.search_input)
        layout.addLayout(search_layout)

        # File list
        self.table = QTreeWidget()
        self.table.setColumnCount(4)
        self.table.setRootIsDecorated(False)
        self.table.setAlternatingRowColors(True)
        self.table.setSortingEnabled(True)
        self.table.setSelectionMode(QTreeWidget.SelectionMode.SingleSelection)
        self.table.setEditTriggers(QTreeWidget.EditTrigger.NoEditTriggers)
        self.table.itemDoubleClicked.connect(lambda _item, _col: self.open_selected())
        self.table.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.table.customContextMenuRequested.connect(self.show_context_menu)
        self.update_headers()

        header = self.table.header()
        header.setStretchLastSection(False)
        header.setSectionResizeMode(0, QHeaderView.ResizeMode.Stretch)
        for i in range(1, 4):
            header.setSectionResizeMode(i, QHeaderView.ResizeMode.ResizeToContents)

        layout.addWidget(self.table)

        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)
        self.info_label = QLabel()
        self.status_bar.addPermanentWidget(self.info_label)

        self.table.keyPressEvent = self.table_key_press

    def create_menus(self):
        """Create menu bar"""
        menubar = self.menuBar()

        # File menu
        file_menu = menubar.addMenu("&File")

        open_action = QAction("&Open Store...", self)
        open_action.setShortcut(QKeySequence.StandardKey.Open)
        open_action.setToolTip("Open a folder as a record store")
        open_action.triggered.connect(self.open_store)
        file_menu.addAction(open_action)

        close_action = QAction("&Close Store", self)
        close_action.setShortcut(QKeySequence.StandardKey.Close)
        close_action.triggered.connect(self.close_store)
        file_menu.addAction(close_action)

        file_menu.addSeparator()

        check_action = QAction("Check &Integrity", self)
        check_action.setShortcut("Ctrl+Shift+I")
        check_action.setToolTip("Look for broken chains, size mismatches and orphaned blocks")
        check_action.triggered.connect(self.check_integrity)
        file_menu.addAction(check_action)

        file_menu.addSeparator()

        exit_action = QAction("E&xit", self)
        exit_action.setShortcut("Ctrl+Q")
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        # Edit menu
        edit_menu = menubar.addMenu("&Edit")

        new_file_action = QAction("&New File...", self)
        new_file_action.setShortcut(QKeySequence.StandardKey.New)
        new_file_action.triggered.connect(self.create_new_file)
        edit_menu.addAction(new_file_action)

        open_file_action = QAction("&Open File", self)
        open_file_action.triggered.connect(self.open_selected)
        edit_menu.addAction(open_file_action)

        edit_file_action = QAction("&Edit File...", self)
        edit_file_action.setShortcut("Ctrl+E")
        edit_file_action.triggered.connect(self.edit_selected)
        edit_menu.addAction(edit_file_action)

        edit_menu.addSeparator()

        delete_action = QAction("&Delete", self)
        delete_action.setToolTip("Move the selected file to the Recycle Bin")
        delete_action.triggered.connect(self.delete_selected)
        edit_menu.addAction(delete_action)

        restore_action = QAction("&Restore", self)
        restore_action.setShortcut("Ctrl+R")
        restore_action.setToolTip("Restore the selected file from the Recycle Bin")
        restore_action.triggered.connect(self.restore_selected)
        edit_menu.addAction(restore_action)

        # View menu
        view_menu = menubar.addMenu("&View")
        view_group = QActionGroup(self)
        view_group.setExclusive(True)

        self.view_files_action = QAction("&Files", self)
        self.view_files_action.setCheckable(True)
        self.view_files_action.setChecked(True)
        self.view_files_action.triggered.connect(lambda: self.set_trash_view(False))
        view_group.addAction(self.view_files_action)
        view_menu.addAction(self.view_files_action)

        self.view_trash_action = QAction("&Recycle Bin", self)
        self.view_trash_action.setCheckable(True)
        self.view_trash_action.triggered.connect(lambda: self.set_trash_view(True))
        view_group.addAction(self.view_trash_action)
        view_menu.addAction(self.view_trash_action)

        # Settings menu
        settings_menu = menubar.addMenu("&Settings")

        self.confirm_delete_action = QAction("Confirm &Delete", self)
        self.confirm_delete_action.setCheckable(True)
        self.confirm_delete_action.setChecked(self.confirm_delete)
        self.confirm_delete_action.triggered.connect(self.toggle_confirm_delete)
        settings_menu.addAction(self.confirm_delete_action)

        self.confirm_restore_action = QAction("Confirm &Restore", self)
        self.confirm_restore_action.setCheckable(True)
        self.confirm_restore_action.setChecked(self.confirm_restore)
        self.confirm_restore_action.triggered.connect(self.toggle_confirm_restore)
        settings_menu.addAction(self.confirm_restore_action)

        self.confirm_save_action = QAction("Confirm &Save", self)
        self.confirm_save_action.setCheckable(True)
        self.confirm_save_action.setChecked(self.confirm_save)
        self.confirm_save_action.triggered.connect(self.toggle_confirm_save)
        settings_menu.addAction(self.confirm_save_action)

        settings_menu.addSeparator()

        self.reject_duplicates_action = QAction("Reject Duplicate &Names", self)
        self.reject_duplicates_action.setCheckable(True)
        self.reject_duplicates_action.setChecked(self.duplicate_policy == DUPLICATE_REJECT)
        self.reject_duplicates_action.setToolTip(
            "When off, creating a file with an existing name replaces the old file"
        )
        self.reject_duplicates_action.triggered.connect(self.toggle_reject_duplicates)
        settings_menu.addAction(self.reject_duplicates_action)

        self.trashed_rewrite_action = QAction("Allow Editing Files in Recycle &Bin", self)
        self.trashed_rewrite_action.setCheckable(True)
        self.trashed_rewrite_action.setChecked(self.allow_trashed_rewrite)
        self.trashed_rewrite_action.triggered.connect(self.toggle_trashed_rewrite)
        settings_menu.addAction(self.trashed_rewrite_action)

        settings_menu.addSeparator()

        self.legacy_format_action = QAction("&Legacy Record Format", self)
        self.legacy_format_action.setCheckable(True)
        self.legacy_format_action.setChecked(self.record_format == RECORD_FORMAT_LEGACY)
        self.legacy_format_action.setToolTip(
            "Read and write stores created by the FAT console program (bloque_ records, Spanish keys)"
        )
        self.legacy_format_action.triggered.connect(self.toggle_legacy_format)
        settings_menu.addAction(self.legacy_format_action)

        # Help menu
        help_menu = menubar.addMenu("&Help")
        about_action = QAction("&About", self)
        about_action.triggered.connect(self.show_about)
        help_menu.addAction(about_action)

    def create_toolbar(self):
        """Create the main toolbar"""
        toolbar = QToolBar("Main Toolbar")
        toolbar.setObjectName("MainToolbar")
        toolbar.setIconSize(QSize(24, 24))
        toolbar.setMovable(False)
        toolbar.setToolButtonStyle(Qt.ToolButtonStyle.ToolButtonTextUnderIcon)
        self.addToolBar(Qt.ToolBarArea.TopToolBarArea, toolbar)

        open_action = QAction(self.style().standardIcon(QStyle.StandardPixmap.SP_DirOpenIcon), "Open", self)
        open_action.setStatusTip("Open a folder as a record store")
        open_action.triggered.connect(self.open_store)
        toolbar.addAction(open_action)

        toolbar.addSeparator()

        new_action = QAction(self.style().standardIcon(QStyle.StandardPixmap.SP_FileIcon), "New File", self)
        new_action.setStatusTip("Create a new file")
        new_action.triggered.connect(self.create_new_file)
        toolbar.addAction(new_action)

        view_action = QAction(self.style().standardIcon(QStyle.StandardPixmap.SP_FileDialogContentsView), "View", self)
        view_action.setStatusTip("Show the content of the selected file")
        view_action.triggered.connect(self.open_selected)
        toolbar.addAction(view_action)

        edit_action = QAction(self.style().standardIcon(QStyle.StandardPixmap.SP_FileDialogDetailedView), "Edit", self)
        edit_action.setStatusTip("Replace the content of the selected file")
        edit_action.triggered.connect(self.edit_selected)
        toolbar.addAction(edit_action)

        toolbar.addSeparator()

        delete_action = QAction(self.style().standardIcon(QStyle.StandardPixmap.SP_TrashIcon), "Delete", self)
        delete_action.setStatusTip("Move the selected file to the Recycle Bin (Del key)")
        delete_action.triggered.connect(self.delete_selected)
        toolbar.addAction(delete_action)

        restore_action = QAction(self.style().standardIcon(QStyle.StandardPixmap.SP_BrowserReload), "Restore", self)
        restore_action.setStatusTip("Restore the selected file from the Recycle Bin")
        restore_action.triggered.connect(self.restore_selected)
        toolbar.addAction(restore_action)

        toolbar.addSeparator()

        self.trash_toggle_action = QAction(self.style().standardIcon(QStyle.StandardPixmap.SP_DirIcon), "Recycle Bin", self)
        self.trash_toggle_action.setCheckable(True)
        self.trash_toggle_action.setStatusTip("Switch between files and the Recycle Bin")
        self.trash_toggle_action.toggled.connect(self.set_trash_view)
        toolbar.addAction(self.trash_toggle_action)

    def show_context_menu(self, position):
        """Show context menu for the file list"""
        if not self.service:
            return

        menu = QMenu()
        new_action = QAction("New File...", self)
        new_action.triggered.connect(self.create_new_file)
        menu.addAction(new_action)

        if self.selected_entry() is not None:
            menu.addSeparator()
            open_action = QAction("Open", self)
            open_action.triggered.connect(self.open_selected)
            menu.addAction(open_action)

            edit_action = QAction("Edit...", self)
            edit_action.triggered.connect(self.edit_selected)
            menu.addAction(edit_action)

            menu.addSeparator()
            if self.showing_trash:
                restore_action = QAction("Restore", self)
                restore_action.triggered.connect(self.restore_selected)
                menu.addAction(restore_action)
            else:
                delete_action = QAction("Delete", self)
                delete_action.triggered.connect(self.delete_selected)
                menu.addAction(delete_action)

        menu.exec(self.table.viewport().mapToGlobal(position))

    def table_key_press(self, event):
        """Handle keyboard shortcuts in the file list"""
        if event.key() in (Qt.Key.Key_Delete, Qt.Key.Key_Backspace):
            self.delete_selected()
        elif event.key() in (Qt.Key.Key_Return, Qt.Key.Key_Enter):
            self.open_selected()
        else:
            QTreeWidget.keyPressEvent(self.table, event)

    # ------------------------------------------------------------------
    # Settings toggles
    # ------------------------------------------------------------------

    def toggle_confirm_delete(self):
        self.confirm_delete = self.confirm_delete_action.isChecked()
        self.settings.setValue('confirm_delete', self.confirm_delete)
        self.logger.info(f"Settings: Confirm delete set to {self.confirm_delete}")

    def toggle_confirm_restore(self):
        self.confirm_restore = self.confirm_restore_action.isChecked()
        self.settings.setValue('confirm_restore', self.confirm_restore)
        self.logger.info(f"Settings: Confirm restore set to {self.confirm_restore}")

    def toggle_confirm_save(self):
        self.confirm_save = self.confirm_save_action.isChecked()
        self.settings.setValue('confirm_save', self.confirm_save)
        self.logger.info(f"Settings: Confirm save set to {self.confirm_save}")

    def toggle_reject_duplicates(self):
        """Switch between replacing and rejecting files with an existing name"""
        self.duplicate_policy = DUPLICATE_REJECT if self.reject_duplicates_action.isChecked() else DUPLICATE_OVERWRITE
        self.settings.setValue('duplicate_policy', self.duplicate_policy)
        self.logger.info(f"Settings: Duplicate name policy set to {self.duplicate_policy}")
        self.reload_service()

    def toggle_trashed_rewrite(self):
        self.allow_trashed_rewrite = self.trashed_rewrite_action.isChecked()
        self.settings.setValue('allow_trashed_rewrite', self.allow_trashed_rewrite)
        self.logger.info(f"Settings: Allow editing files in recycle bin set to {self.allow_trashed_rewrite}")
        self.reload_service()

    def toggle_legacy_format(self):
        self.record_format = RECORD_FORMAT_LEGACY if self.legacy_format_action.isChecked() else RECORD_FORMAT_NATIVE
        self.settings.setValue('record_format', self.record_format)
        self.logger.info(f"Settings: Record format set to {self.record_format}")
        self.reload_service()
        self.refresh_file_list()

    # ------------------------------------------------------------------
    # Store handling
    # ------------------------------------------------------------------

    def open_store(self):
        """Pick a folder and open it as a record store"""
        start_dir = self.store_path or self.settings.value('last_store_path', '')
        path = QFileDialog.getExistingDirectory(self, "Open Record Store", start_dir)
        if path:
            self.load_store(path)

    def load_store(self, path: str):
        """Open the record store in `path`"""
        try:
            store = DirectoryRecordStore(path, create=False)
            self.service = FileService(store, self.build_config())
        except (FATError, OSError) as e:
            self.logger.error(f"Failed to open store {path}: {e}", exc_info=True)
            QMessageBox.critical(self, "Error", f"Failed to open store:\n{e}")
            return

        self.store_path = path
        self.settings.setValue('last_store_path', path)
        self.setWindowTitle(f"FATManager - {Path(path).name}")
        self.refresh_file_list()
        self.status_bar.showMessage(f"Loaded: {path}")
        self.logger.info(f"Loaded store: {path}")

    def reload_service(self):
        """Rebuild the file service after a configuration change"""
        if self.service:
            self.service = FileService(self.service.store, self.build_config())

    def close_store(self):
        if self.service:
            self.service = None
            self.store_path = None
            self.setWindowTitle("FATManager")
            self.refresh_file_list()
            self.logger.info("Store closed")
            self.status_bar.showMessage("Store closed")

    # ------------------------------------------------------------------
    # File list
    # ------------------------------------------------------------------

    def update_headers(self):
        third = 'Deleted' if self.showing_trash else 'Created'
        self.table.setHeaderLabels(['Name', 'Size', third, 'Modified'])

    def set_trash_view(self, trashed: bool):
        """Switch between the file list and the Recycle Bin"""
        if self.showing_trash == trashed:
            return
        self.showing_trash = trashed

        # Keep the menu, toolbar and view state in step
        self.view_trash_action.setChecked(trashed)
        self.view_files_action.setChecked(not trashed)
        self.trash_toggle_action.blockSignals(True)
        self.trash_toggle_action.setChecked(trashed)
        self.trash_toggle_action.blockSignals(False)

        self.update_headers()
        self.refresh_file_list()

    def refresh_file_list(self):
        """Refresh the file list from the store"""
        self.table.setSortingEnabled(False)
        self.table.setUpdatesEnabled(False)
        try:
            self.table.clear()

            if not self.service:
                self.info_label.setText("")
                return

            try:
                result = self.service.list_files(trashed=self.showing_trash)
            except OSError as e:
                self.info_label.setText("")
                self.report_store_error("list files", e)
                return
            if not self.report_failure(result, "List Failed"):
                return

            search_text = self.search_input.text().lower().strip()
            shown = 0
            for entry in result.value:
                if search_text and search_text not in entry.name.lower():
                    continue
                item = SortableTreeWidgetItem(entry_row(entry, self.showing_trash))
                item.setData(0, Qt.ItemDataRole.UserRole, entry.name)
                for column, key in enumerate(sort_keys(entry, self.showing_trash)):
                    item.setData(column, Qt.ItemDataRole.UserRole + 1, key)
                self.table.addTopLevelItem(item)
                shown += 1

            where = "in Recycle Bin" if self.showing_trash else "files"
            if "skipped" in result.message:
                # Unreadable entries were left out of the list
                self.info_label.setText(f"{shown} {where} - some records unreadable, see Check Integrity")
            else:
                self.info_label.setText(f"{shown} {where}")
        finally:
            self.table.setSortingEnabled(True)
            self.table.setUpdatesEnabled(True)

    def selected_entry(self) -> Optional[str]:
        """Name of the selected file, or None"""
        items = self.table.selectedItems()
        if not items:
            return None
        return items[0].data(0, Qt.ItemDataRole.UserRole)

    def require_selection(self) -> Optional[str]:
        if not self.service:
            QMessageBox.information(self, "No Store Loaded", "No store loaded.")
            return None
        name = self.selected_entry()
        if name is None:
            QMessageBox.information(self, "Info", "Please select a file first")
        return name

    def report_failure(self, result: OperationResult, title: str) -> bool:
        """Show a failed result to the user. Returns True if the result succeeded."""
        if result.success:
            return True
        if isinstance(result.error, FATCorruptionError):
            QMessageBox.critical(self, "Store Corruption", f"{title}:\n\n{result.message}")
        else:
            QMessageBox.warning(self, title, result.message)
        self.status_bar.showMessage(f"{title}: {result.message}")
        return False

    def report_store_error(self, action: str, error: OSError):
        """Show an I/O error raised by the record store"""
        self.logger.error(f"Store error while trying to {action}: {error}", exc_info=True)
        QMessageBox.critical(self, "Error", format_store_error(action, error))
        self.status_bar.showMessage(f"Failed to {action}")

    # ------------------------------------------------------------------
    # File operations
    # ------------------------------------------------------------------

    def create_new_file(self):
        if not self.service:
            QMessageBox.information(self, "No Store Loaded", "Open a store first.")
            return

        dialog = FileEditorDialog(self)
        if not dialog.exec():
            return

        try:
            result = self.service.create_file(dialog.file_name, dialog.content)
        except OSError as e:
            self.report_store_error(f"create '{dialog.file_name}'", e)
            self.refresh_file_list()
            return
        if self.report_failure(result, "Create Failed"):
            self.set_trash_view(False)
            self.refresh_file_list()
            self.status_bar.showMessage(result.message)

    def open_selected(self):
        name = self.require_selection()
        if name is None:
            return

        try:
            entry_result = self.service.get_file(name)
            if not self.report_failure(entry_result, "Open Failed"):
                return
            result = self.service.read_file(entry_result.value)
        except OSError as e:
            self.report_store_error(f"open '{name}'", e)
            return
        if not self.report_failure(result, "Open Failed"):
            return

        FileViewerDialog(entry_result.value, result.value, self).exec()

    def edit_selected(self):
        name = self.require_selection()
        if name is None:
            return

        try:
            result = self.service.read_file(name)
        except OSError as e:
            self.report_store_error(f"open '{name}'", e)
            return
        if not self.report_failure(result, "Open Failed"):
            return

        dialog = FileEditorDialog(self, name=name, content=result.value, editing=True)
        if not dialog.exec():
            self.status_bar.showMessage("Changes not saved")
            return

        try:
            result = self.service.rewrite_file(name, dialog.content)
        except OSError as e:
            self.report_store_error(f"save '{name}'", e)
            self.refresh_file_list()
            return
        if self.report_failure(result, "Save Failed"):
            self.refresh_file_list()
            self.status_bar.showMessage(result.message)

    def delete_selected(self):
        name = self.require_selection()
        if name is None:
            return
        if self.showing_trash:
            QMessageBox.information(self, "Info", f"'{name}' is already in the Recycle Bin")
            return

        if self.confirm_delete:
            response = QMessageBox.question(
                self,
                "Confirm Delete",
                f"Move '{name}' to the Recycle Bin?",
                QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
            )
            if response == QMessageBox.StandardButton.No:
                return

        self.logger.info(f"User requested delete of '{name}'")
        try:
            result = self.service.trash_file(name)
        except OSError as e:
            self.report_store_error(f"delete '{name}'", e)
            return
        if self.report_failure(result, "Delete Failed"):
            self.refresh_file_list()
            self.status_bar.showMessage(result.message)

    def restore_selected(self):
        name = self.require_selection()
        if name is None:
            return
        if not self.showing_trash:
            QMessageBox.information(self, "Info", "Switch to the Recycle Bin to restore files")
            return

        if self.confirm_restore:
            response = QMessageBox.question(
                self,
                "Confirm Restore",
                f"Restore '{name}'?",
                QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
            )
            if response == QMessageBox.StandardButton.No:
                return

        try:
            result = self.service.restore_file(name)
        except OSError as e:
            self.report_store_error(f"restore '{name}'", e)
            return
        if self.report_failure(result, "Restore Failed"):
            self.refresh_file_list()
            self.status_bar.showMessage(result.message)

    def check_integrity(self):
        if not self.service:
            QMessageBox.information(self, "No Store Loaded", "No store loaded.")
            return
        try:
            result = self.service.check_integrity()
        except OSError as e:
            self.report_store_error("check the store", e)
            return
        if self.report_failure(result, "Integrity Check Failed"):
            self.status_bar.showMessage(result.message)
            IntegrityReportDialog(result.value, self).exec()

    def show_about(self):
        """Show about dialog"""
        QMessageBox.about(self, "About", about_html)

    def closeEvent(self, event):
        """Handle window close event - save state"""
        self.settings.setValue('window_geometry', self.saveGeometry())
        self.settings.setValue('window_state', self.saveState())
        event.accept()


def main():
    """Main entry point"""
    app = QApplication(sys.argv)
    app.setApplicationName("FATManager")
    app.setOrganizationName("FATManager")
    app.setStyle('Fusion')

    store_path = sys.argv[1] if len(sys.argv) > 1 else None
    window = FATManagerWindow(store_path)
    window.show()

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
