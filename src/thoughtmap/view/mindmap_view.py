"""
Mind Map View
=============
QGraphicsView hosting the MindMapScene, plus the container widget that binds
it to a view-model.

The view owns the Camera: two-finger pan, pinch, the mouse wheel and
middle-button (or Space + left button) drags all end up in Camera.pan /
Camera.pinch, after which the transform is re-applied. A frame timer drives
MindMapScene.update_frame().
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QElapsedTimer, QEvent, QPointF, QRectF, Qt, QTimer, Signal
from PySide6.QtGui import (
    QColor, QKeyEvent, QMouseEvent, QPainter, QResizeEvent, QTransform, QWheelEvent
)
from PySide6.QtWidgets import (
    QFrame, QGestureEvent, QGraphicsView, QPanGesture, QPinchGesture, QVBoxLayout, QWidget
)

from thoughtmap.config import AppConfig
from thoughtmap.model.state import MindMapViewModel
from thoughtmap.scene.camera import Camera
from thoughtmap.view.mindmap_scene import MindMapScene

logger = logging.getLogger(__name__)

FPS_SAMPLE_MS = 500


class MindMapView(QGraphicsView):
    """Camera-driven view over a MindMapScene."""
    camera_changed = Signal(float, float, float)  # x, y, scale

    def __init__(self, scene: MindMapScene, config: AppConfig | None = None, parent: QWidget | None = None) -> None:
        super().__init__(scene, parent)
        self._config = config or AppConfig()
        self._mind_map_scene = scene
        self.camera = Camera(min_zoom=self._config.min_zoom, max_zoom=self._config.max_zoom)
        self._camera_initialized = False

        self._pan_anchor: Optional[QPointF] = None
        self._space_held = False

        self.setRenderHints(self.renderHints() | QPainter.RenderHint.Antialiasing | QPainter.RenderHint.TextAntialiasing)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.NoAnchor)
        self.setResizeAnchor(QGraphicsView.ViewportAnchor.NoAnchor)
        self.setViewportUpdateMode(QGraphicsView.ViewportUpdateMode.BoundingRectViewportUpdate)
        self.setFrameShape(QFrame.Shape.NoFrame)

        self.viewport().setAttribute(Qt.WidgetAttribute.WA_AcceptTouchEvents, True)
        self.viewport().grabGesture(Qt.GestureType.PinchGesture)
        self.viewport().grabGesture(Qt.GestureType.PanGesture)

        # frame loop
        self._frame_timer = QTimer(self)
        self._frame_timer.setInterval(self._config.frame_interval_ms)
        self._frame_timer.timeout.connect(self._on_frame)
        self._frame_timer.start()

        # debug overlay
        self._fps_clock = QElapsedTimer()
        self._fps_clock.start()
        self._frames_since_sample = 0
        self._fps: float = 0.0

    # ------------------------------------------------------------------------------
    # Camera
    # ------------------------------------------------------------------------------

    def reset_camera(self) -> None:
        """Back to the scene centre at 1:1."""
        self.camera.reset(self._mind_map_scene.center)
        logger.debug(f"Camera reset to {self.camera.position}.")
        self.apply_camera()

    def apply_camera(self) -> None:
        zoom = self.camera.zoom
        self.setTransform(QTransform.fromScale(zoom, zoom))
        self.centerOn(QPointF(self.camera.x, self.camera.y))
        self.camera_changed.emit(self.camera.x, self.camera.y, self.camera.scale)

    def handle_pan(self, translation: QPointF) -> None:
        """Translation in viewport pixels since the previous pan update."""
        self.camera.pan(translation.x(), translation.y())
        self.apply_camera()

    def handle_pinch(self, factor: float) -> None:
        """Incremental pinch factor; >1 zooms in. Clamped by the camera."""
        if factor <= 0:
            return
        self.camera.pinch(factor)
        self.apply_camera()

    # ------------------------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------------------------

    def viewportEvent(self, event: QEvent) -> bool:
        if event.type() == QEvent.Type.Gesture:
            return self._gesture_event(event)
        return super().viewportEvent(event)

    def _gesture_event(self, event: QGestureEvent) -> bool:
        pinch = event.gesture(Qt.GestureType.PinchGesture)
        if isinstance(pinch, QPinchGesture):
            # Only live updates; start/finish carry no incremental factor
            if pinch.state() == Qt.GestureState.GestureUpdated:
                self.handle_pinch(pinch.scaleFactor())
            event.accept(pinch)

        pan = event.gesture(Qt.GestureType.PanGesture)
        if isinstance(pan, QPanGesture):
            if pan.state() == Qt.GestureState.GestureUpdated:
                self.handle_pan(pan.delta())
            event.accept(pan)

        return True

    def wheelEvent(self, event: QWheelEvent) -> None:
        delta = event.angleDelta().y()
        if delta == 0:
            event.ignore()
            return
        self.handle_pinch(self._config.wheel_zoom_base ** delta)
        event.accept()

    # ------------------------------------------------------------------------------
    # Mouse / keyboard pan
    # ------------------------------------------------------------------------------

    def _starts_pan(self, event: QMouseEvent) -> bool:
        if event.button() == Qt.MouseButton.MiddleButton:
            return True
        return event.button() == Qt.MouseButton.LeftButton and self._space_held

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if self._starts_pan(event):
            self._pan_anchor = event.position()
            self.viewport().setCursor(Qt.CursorShape.ClosedHandCursor)
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        if self._pan_anchor is not None:
            pos = event.position()
            self.handle_pan(pos - self._pan_anchor)
            self._pan_anchor = pos
            event.accept()
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if self._pan_anchor is not None:
            self._pan_anchor = None
            self.viewport().unsetCursor()
            event.accept()
            return
        super().mouseReleaseEvent(event)

    def keyPressEvent(self, event: QKeyEvent) -> None:
        if event.key() == Qt.Key.Key_Space and not event.isAutoRepeat():
            self._space_held = True
            self.viewport().setCursor(Qt.CursorShape.OpenHandCursor)
            event.accept()
            return
        super().keyPressEvent(event)

    def keyReleaseEvent(self, event: QKeyEvent) -> None:
        if event.key() == Qt.Key.Key_Space and not event.isAutoRepeat():
            self._space_held = False
            self.viewport().unsetCursor()
            event.accept()
            return
        super().keyReleaseEvent(event)

    # ------------------------------------------------------------------------------
    # Resize / frame loop
    # ------------------------------------------------------------------------------

    def resizeEvent(self, event: QResizeEvent) -> None:
        super().resizeEvent(event)
        size = event.size()
        self._mind_map_scene.set_size((float(size.width()), float(size.height())))
        if not self._camera_initialized:
            self._camera_initialized = True
            self.camera.reset(self._mind_map_scene.center)
        self.apply_camera()

    def _on_frame(self) -> None:
        self._mind_map_scene.update_frame()

        if not self._config.show_debug_info:
            return
        self._frames_since_sample += 1
        elapsed = self._fps_clock.elapsed()
        if elapsed >= FPS_SAMPLE_MS:
            self._fps = self._frames_since_sample * 1000.0 / elapsed
            self._frames_since_sample = 0
            self._fps_clock.restart()
            self.viewport().update()

    @property
    def fps(self) -> float:
        return self._fps

    def drawForeground(self, painter: QPainter, rect: QRectF) -> None:
        if not self._config.show_debug_info:
            return
        painter.save()
        painter.resetTransform()
        painter.setPen(QColor("#444444"))
        text = f"FPS: {self._fps:.0f}   nodes: {self._mind_map_scene.node_count}   edges: {self._mind_map_scene.edge_count}"
        painter.drawText(QPointF(8, self.viewport().height() - 8), text)
        painter.restore()

    def shutdown(self) -> None:
        self._frame_timer.stop()


class MindMapWidget(QWidget):
    """Binds a MindMapViewModel to a scene and a view and keeps them in sync."""

    def __init__(
        self,
        view_model: MindMapViewModel,
        config: AppConfig | None = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._config = config or AppConfig()
        self.view_model = view_model

        self.scene = MindMapScene(config=self._config)
        self.scene.view_model = view_model
        self.view = MindMapView(self.scene, self._config, self)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.view)

        view_model.thoughts_changed.connect(self.scene.sync_with_view_model)
        view_model.connections_changed.connect(self.scene.sync_with_view_model)
        view_model.selection_changed.connect(self._on_selection_changed)

        self.scene.sync_with_view_model()

    def _on_selection_changed(self, thought) -> None:
        self.scene.select_thought(thought.id if thought is not None else None)

    def reset_camera(self) -> None:
        self.view.reset_camera()
