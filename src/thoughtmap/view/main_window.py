"""
Main Application Window
=======================
Hosts the mind map with a toolbar for the few editing actions the
visualization needs to be usable on its own.

Why is this file needed?
------------------------
1. Layout: it puts the MindMapWidget in the centre and a status bar below.
2. Routing: toolbar actions call into the view-model; validation errors from
   the view-model surface as message boxes instead of tracebacks.
"""
import logging
import os
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QCloseEvent, QIcon, QKeySequence
from PySide6.QtWidgets import QInputDialog, QMainWindow, QMessageBox, QToolBar

from thoughtmap.config import APP_ICON_PATH, VISIBLE_APP_NAME, AppConfig
from thoughtmap.model.entities import Thought, ThoughtCategory
from thoughtmap.model.state import MindMapViewModel
from thoughtmap.view.mindmap_view import MindMapWidget

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self, view_model: MindMapViewModel, config: Optional[AppConfig] = None) -> None:
        super().__init__()
        self.view_model = view_model
        self._previous_selection: Optional[Thought] = None
        self._last_selected: Optional[Thought] = None

        self.setWindowTitle(VISIBLE_APP_NAME)
        if os.path.exists(APP_ICON_PATH):
            self.setWindowIcon(QIcon(APP_ICON_PATH))
        self.resize(1200, 800)

        self.mind_map = MindMapWidget(view_model, config, self)
        self.setCentralWidget(self.mind_map)

        self._create_actions()
        self._create_toolbar()
        self.statusBar().showMessage("Tap a thought to select it, drag to move it.")

        view_model.selection_changed.connect(self.on_selection_changed)
        self._update_action_state()

    def _create_actions(self) -> None:
        self.act_add = QAction("Add Thought", self)
        self.act_add.setShortcut(QKeySequence.StandardKey.New)
        self.act_add.triggered.connect(self.on_add_thought)

        self.act_connect = QAction("Connect", self)
        self.act_connect.setToolTip("Connect the selected thought to the one selected before it")
        self.act_connect.setShortcut("Ctrl+L")
        self.act_connect.triggered.connect(self.on_connect)

        self.act_delete = QAction("Delete", self)
        self.act_delete.setShortcut(QKeySequence.StandardKey.Delete)
        self.act_delete.triggered.connect(self.on_delete)

        self.act_reset_view = QAction("Reset View", self)
        self.act_reset_view.setShortcut("Ctrl+0")
        self.act_reset_view.triggered.connect(self.mind_map.reset_camera)

    def _create_toolbar(self) -> None:
        tb = QToolBar("Mind Map", self)
        tb.setMovable(False)
        tb.setToolButtonStyle(Qt.ToolButtonStyle.ToolButtonTextOnly)
        tb.addAction(self.act_add)
        tb.addAction(self.act_connect)
        tb.addAction(self.act_delete)
        tb.addSeparator()
        tb.addAction(self.act_reset_view)
        self.addToolBar(tb)

    def _update_action_state(self) -> None:
        selected = self.view_model.selected_thought
        self.act_delete.setEnabled(selected is not None)
        self.act_connect.setEnabled(
            selected is not None
            and self._previous_selection is not None
            and self.view_model.thought(self._previous_selection.id) is not None
        )

    # --- SLOTS ---

    def on_selection_changed(self, thought: Optional[Thought]) -> None:
        # Remember the last two distinct selections so Connect has two endpoints
        if thought is not None:
            if self._last_selected is not None and self._last_selected != thought:
                self._previous_selection = self._last_selected
            self._last_selected = thought
            self.statusBar().showMessage(f"{thought.category.display_name}: {thought.content}")
        else:
            self.statusBar().clearMessage()
        self._update_action_state()

    def on_add_thought(self) -> None:
        content, ok = QInputDialog.getText(self, "New Thought", "What's on your mind?")
        if not ok:
            return
        names = [c.display_name for c in ThoughtCategory]
        name, ok = QInputDialog.getItem(self, "New Thought", "Category:", names, 0, False)
        if not ok:
            return
        category = list(ThoughtCategory)[names.index(name)]
        try:
            self.view_model.add_thought(content, category)
        except ValueError as e:
            QMessageBox.warning(self, "Cannot add thought", str(e))

    def on_connect(self) -> None:
        current = self.view_model.selected_thought
        previous = self._previous_selection
        if current is None or previous is None:
            return
        try:
            self.view_model.add_connection(previous, current)
        except (ValueError, KeyError) as e:
            QMessageBox.warning(self, "Cannot connect", str(e))

    def on_delete(self) -> None:
        current = self.view_model.selected_thought
        if current is None:
            return
        self.view_model.remove_thought(current)
        # A deleted thought can no longer be a Connect endpoint
        if self._previous_selection == current:
            self._previous_selection = None
        if self._last_selected == current:
            self._last_selected = None
        self._update_action_state()

    def closeEvent(self, event: QCloseEvent, /) -> None:
        self.mind_map.view.shutdown()
        logger.info("Main window closed.")
        event.accept()
