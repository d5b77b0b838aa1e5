"""Mind map canvas widget.

A QWidget that renders and interacts with a GraphStore.  Handles:
  - Scroll (middle-mouse or click-drag on empty space)
  - Zoom (mouse wheel, zoom_in / zoom_out)
  - Node drag
  - Connect mode (link affordance on a hovered node, or Link Mode)
  - Midpoint "×" on each connection to remove it
  - Hover affordances: link, delete (never for root)
  - Inline colour palette under the selected node
  - Double-click on a node to request a label edit
  - Show All / center on node with a smooth scroll

Pointer rules live in InteractionController; this widget only converts
events to canvas coordinates and paints.

Coordinate spaces:
  scene  – canvas units stored in MindMapNode.x / .y
  view   – screen pixels; scene_to_view / view_to_scene convert between them
  The scroll offset (_origin) is the scene point shown at the view's top-left.
"""

from __future__ import annotations

from typing import Optional

from PySide6.QtWidgets import QWidget, QSizePolicy
from PySide6.QtCore import (
    Qt, QPointF, QRectF, Signal, QVariantAnimation, QEasingCurve,
)
from PySide6.QtGui import (
    QPainter, QPen, QBrush, QColor, QFont, QFontMetricsF,
    QMouseEvent, QWheelEvent, QKeyEvent, QLinearGradient,
)

from .graph_model import (
    GraphStore, MindMapNode, MindMapConnection,
    NODE_W, NODE_H, PALETTE, ROOT_ID,
)
from .interaction import InteractionController
from ..ops.export import wrap_label


# ---------------------------------------------------------------------------
# Visual constants
# ---------------------------------------------------------------------------

CORNER_R        = 8
BTN_R           = 10      # hover action button radius
BTN_GAP         = 4
DEL_R           = 8       # connection midpoint "×" radius
SWATCH_R        = 8
SWATCH_GAP      = 4
PALETTE_PAD     = 4
PALETTE_OFFSET  = 6       # gap between node bottom and palette strip
LABEL_PAD       = 8
LABEL_LINE_H    = 14

ZOOM_MIN        = 0.25
ZOOM_MAX        = 3.0
ZOOM_STEP       = 1.12
SCROLL_MS       = 350

# Colours
C_BG_TOP        = QColor("#0d1117")
C_BG_BOTTOM     = QColor("#161d2b")
C_GRID          = QColor("#1c2333")
C_SEL_RING      = QColor("#3a7bd5")
C_CONNECT_RING  = QColor("#22c55e")
C_BTN_LINK      = QColor("#3b82f6")
C_BTN_DELETE    = QColor("#ef4444")
C_BTN_TEXT      = QColor("#ffffff")
C_DEL_FILL      = QColor("#ffffff")
C_DEL_STROKE    = QColor("#ef4444")
C_PALETTE_BG    = QColor("#1a2236")
C_PALETTE_EDGE  = QColor("#2a3a5c")
C_GUIDE_BG      = QColor("#1a2236")
C_TEXT          = QColor("#e6e6e6")
C_TEXT_DIM      = QColor("#888888")

WIRE_ALPHA      = 0.6
FILL_ALPHA      = 0x20

GUIDE_TEXT = ('Click "Add Node" • Drag to move • Double-click to edit • '
              'Click "Link Mode" then nodes to connect')


# ---------------------------------------------------------------------------
# Hit-test result
# ---------------------------------------------------------------------------

class _Hit:
    NONE        = "none"
    NODE_BODY   = "node_body"
    LINK_BTN    = "link_button"
    DELETE_BTN  = "delete_button"
    SWATCH      = "swatch"
    CONN_DELETE = "connection_delete"

    def __init__(self, kind=NONE, node: MindMapNode = None,
                 conn: MindMapConnection = None, color: str = None):
        self.kind = kind
        self.node = node
        self.conn = conn
        self.color = color        # palette colour for SWATCH hits


# ---------------------------------------------------------------------------
# Canvas
# ---------------------------------------------------------------------------

class MindMapCanvas(QWidget):
    """Interactive mind map canvas.

    Signals:
      edit_requested(str)    – node id double-clicked
      drag_finished(str)     – node id whose drag moved it (one undo step)
      status_message(str)    – user-facing guard-rail text
      connect_mode_changed() – connect mode entered or left
    """

    edit_requested = Signal(str)
    drag_finished = Signal(str)
    status_message = Signal(str)
    connect_mode_changed = Signal()

    def __init__(self, model: GraphStore, parent=None):
        super().__init__(parent)
        self.model = model
        self.controller = InteractionController(model)
        self.model.on_change(self._on_model_changed)

        self.setFocusPolicy(Qt.StrongFocus)
        self.setMouseTracking(True)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.setMinimumSize(400, 300)

        # Viewport transform
        self._origin = QPointF(0.0, 0.0)  # scroll offset (scene units)
        self._scale  = 1.0                # zoom multiplier

        # Pan state
        self._pan_start: Optional[QPointF] = None
        self._pan_origin_start: Optional[QPointF] = None

        self._hover_node_id: Optional[str] = None
        self._hover_conn: Optional[MindMapConnection] = None

        self._scroll_anim = QVariantAnimation(self)
        self._scroll_anim.setDuration(SCROLL_MS)
        self._scroll_anim.setEasingCurve(QEasingCurve.InOutQuad)
        self._scroll_anim.valueChanged.connect(self._on_scroll_anim)

        self._label_font = QFont("Segoe UI")
        self._label_font.setPixelSize(12)
        self._label_font.setBold(True)
        self._label_metrics = QFontMetricsF(self._label_font)

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    @property
    def zoom(self) -> float:
        return self._scale

    @property
    def scroll_offset(self) -> QPointF:
        return QPointF(self._origin)

    def set_zoom(self, zoom: float, anchor: QPointF = None) -> None:
        """Set zoom, keeping the view point `anchor` fixed (default: centre)."""
        if anchor is None:
            anchor = QPointF(self.width() / 2, self.height() / 2)
        anchor_scene = self.view_to_scene(anchor)
        self._scale = max(ZOOM_MIN, min(ZOOM_MAX, zoom))
        self._set_origin(QPointF(
            anchor_scene.x() - anchor.x() / self._scale,
            anchor_scene.y() - anchor.y() / self._scale,
        ))

    def zoom_in(self) -> None:
        self.set_zoom(self._scale * ZOOM_STEP)

    def zoom_out(self) -> None:
        self.set_zoom(self._scale / ZOOM_STEP)

    def show_all(self, animate: bool = True) -> None:
        """Reset zoom and scroll so the centroid of all nodes is centred."""
        if not self.model.nodes:
            return
        self._scale = 1.0
        cx, cy = self.model.centroid()
        self.scroll_to(QPointF(cx - self.width() / 2, cy - self.height() / 2),
                       animate)

    def center_on_node(self, node_id: str, animate: bool = True) -> None:
        node = self.model.get_node(node_id)
        if node is None:
            return
        cx, cy = node.center()
        self.scroll_to(QPointF(cx - self.width() / 2 / self._scale,
                               cy - self.height() / 2 / self._scale),
                       animate)
        self.model.select(node_id)

    def scroll_to(self, origin: QPointF, animate: bool = True) -> None:
        """Scroll so `origin` (scene) is at the view's top-left."""
        self._scroll_anim.stop()
        if not animate:
            self._set_origin(origin)
            return
        self._scroll_anim.setStartValue(QPointF(self._origin))
        self._scroll_anim.setEndValue(self._clamp_origin(origin))
        self._scroll_anim.start()

    def start_link_mode(self) -> None:
        """Link Mode: arm connect mode from the selected node, or cancel."""
        if self.controller.connecting_from is not None:
            self.cancel_link()
            return
        if self.model.selected_id is None:
            self.status_message.emit("Select a node to link from")
            return
        self.controller.start_connect(self.model.selected_id)
        self.connect_mode_changed.emit()
        self.update()

    def cancel_link(self) -> None:
        self.controller.cancel_connect()
        self.connect_mode_changed.emit()
        self.update()

    # -----------------------------------------------------------------------
    # Coordinate helpers
    # -----------------------------------------------------------------------

    def scene_to_view(self, p: QPointF) -> QPointF:
        return QPointF(
            (p.x() - self._origin.x()) * self._scale,
            (p.y() - self._origin.y()) * self._scale,
        )

    def view_to_scene(self, p: QPointF) -> QPointF:
        return QPointF(
            p.x() / self._scale + self._origin.x(),
            p.y() / self._scale + self._origin.y(),
        )

    def _clamp_origin(self, p: QPointF) -> QPointF:
        # The scrollable area starts at scene (0, 0), like node positions.
        return QPointF(max(0.0, p.x()), max(0.0, p.y()))

    def _set_origin(self, p: QPointF) -> None:
        self._origin = self._clamp_origin(p)
        self.update()

    def _on_scroll_anim(self, value) -> None:
        self._origin = QPointF(value)
        self.update()

    # -----------------------------------------------------------------------
    # Geometry (scene units)
    # -----------------------------------------------------------------------

    def _node_rect(self, node: MindMapNode) -> QRectF:
        return QRectF(node.x, node.y, NODE_W, NODE_H)

    def _action_buttons(self, node: MindMapNode) -> list[tuple[str, QPointF]]:
        """Hover buttons at the node's top-right corner, right to left."""
        r = self._node_rect(node)
        kinds = [_Hit.LINK_BTN]
        if node.id != ROOT_ID:
            kinds.append(_Hit.DELETE_BTN)
        cy = r.top() + 2
        cx = r.right() - 2
        out = []
        for kind in reversed(kinds):
            out.append((kind, QPointF(cx, cy)))
            cx -= BTN_R * 2 + BTN_GAP
        return out

    def _palette_swatches(self, node: MindMapNode) -> list[tuple[str, QPointF]]:
        r = self._node_rect(node)
        y = r.bottom() + PALETTE_OFFSET + PALETTE_PAD + SWATCH_R
        x = r.left() + PALETTE_PAD + SWATCH_R
        return [(color, QPointF(x + i * (SWATCH_R * 2 + SWATCH_GAP), y))
                for i, color in enumerate(PALETTE)]

    def _palette_rect(self, node: MindMapNode) -> QRectF:
        r = self._node_rect(node)
        n = len(PALETTE)
        w = n * SWATCH_R * 2 + (n - 1) * SWATCH_GAP + PALETTE_PAD * 2
        return QRectF(r.left(), r.bottom() + PALETTE_OFFSET,
                      w, SWATCH_R * 2 + PALETTE_PAD * 2)

    def _hover_rect(self, node: MindMapNode) -> QRectF:
        """Node rect grown to cover its hover buttons."""
        return self._node_rect(node).adjusted(-2, -BTN_R, BTN_R, 0)

    # -----------------------------------------------------------------------
    # Hit testing
    # -----------------------------------------------------------------------

    def hit_test(self, scene_pos: QPointF) -> _Hit:
        # Inline palette of the selected node sits above everything
        sel = self.model.get_node(self.model.selected_id) if self.model.selected_id else None
        if sel is not None:
            for color, c in self._palette_swatches(sel):
                if _dist(scene_pos, c) <= SWATCH_R:
                    return _Hit(_Hit.SWATCH, sel, color=color)

        # Hover buttons of the hovered node
        hov = self.model.get_node(self._hover_node_id) if self._hover_node_id else None
        if hov is not None:
            for kind, c in self._action_buttons(hov):
                if _dist(scene_pos, c) <= BTN_R:
                    return _Hit(kind, hov)

        for node in reversed(self.model.nodes):
            if self._node_rect(node).contains(scene_pos):
                return _Hit(_Hit.NODE_BODY, node)

        for conn in self.model.connections:
            mid = self.model.connection_midpoint(conn)
            if mid is not None and _dist(scene_pos, QPointF(*mid)) <= DEL_R:
                return _Hit(_Hit.CONN_DELETE, conn=conn)

        return _Hit()

    def _node_under(self, scene_pos: QPointF) -> Optional[MindMapNode]:
        """Topmost node whose hover area contains scene_pos."""
        for node in reversed(self.model.nodes):
            if self._hover_rect(node).contains(scene_pos):
                return node
        return None

    # -----------------------------------------------------------------------
    # Paint
    # -----------------------------------------------------------------------

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)

        grad = QLinearGradient(0, 0, self.width(), self.height())
        grad.setColorAt(0.0, C_BG_TOP)
        grad.setColorAt(1.0, C_BG_BOTTOM)
        painter.fillRect(self.rect(), QBrush(grad))
        self._draw_grid(painter)

        painter.save()
        painter.scale(self._scale, self._scale)
        painter.translate(-self._origin.x(), -self._origin.y())

        self._draw_connections(painter)
        self._draw_nodes(painter)

        painter.restore()

        if len(self.model.nodes) == 1:
            self._draw_guide(painter)

    def _draw_grid(self, painter: QPainter) -> None:
        painter.setPen(QPen(C_GRID, 1))
        step = 40 * self._scale
        ox = (-self._origin.x() * self._scale) % step
        oy = (-self._origin.y() * self._scale) % step
        x = ox
        while x < self.width():
            painter.drawLine(int(x), 0, int(x), self.height())
            x += step
        y = oy
        while y < self.height():
            painter.drawLine(0, int(y), self.width(), int(y))
            y += step

    def _draw_connections(self, painter: QPainter) -> None:
        for conn in self.model.connections:
            ends = self.model.connection_endpoints(conn)
            if ends is None:
                continue
            src, dst = ends
            col = QColor(src.color)
            col.setAlphaF(WIRE_ALPHA)
            width = 3.0 if conn is self._hover_conn else 2.0
            painter.setPen(QPen(col, width))
            painter.drawLine(QPointF(*src.center()), QPointF(*dst.center()))

            # Midpoint delete affordance
            mid = QPointF(*self.model.connection_midpoint(conn))
            painter.setBrush(QBrush(C_DEL_FILL))
            painter.setPen(QPen(C_DEL_STROKE, 2))
            painter.drawEllipse(mid, DEL_R, DEL_R)
            painter.setFont(QFont("Segoe UI", 8))
            painter.drawText(QRectF(mid.x() - DEL_R, mid.y() - DEL_R,
                                    DEL_R * 2, DEL_R * 2),
                             Qt.AlignCenter, "×")

    def _draw_nodes(self, painter: QPainter) -> None:
        for node in self.model.nodes:
            self._draw_node(painter, node)
        # Overlays last so neighbours never cover them
        hov = self.model.get_node(self._hover_node_id) if self._hover_node_id else None
        if hov is not None and self.controller.dragging_id is None:
            self._draw_action_buttons(painter, hov)
        sel = self.model.get_node(self.model.selected_id) if self.model.selected_id else None
        if sel is not None:
            self._draw_palette(painter, sel)

    def _draw_node(self, painter: QPainter, node: MindMapNode) -> None:
        r = self._node_rect(node)
        color = QColor(node.color)

        # Rings: connect source wins over selection
        ring = None
        if self.controller.connecting_from == node.id:
            ring = C_CONNECT_RING
        elif self.model.selected_id == node.id:
            ring = C_SEL_RING
        if ring is not None:
            painter.setPen(QPen(ring, 2))
            painter.setBrush(Qt.NoBrush)
            painter.drawRoundedRect(r.adjusted(-4, -4, 4, 4),
                                    CORNER_R + 3, CORNER_R + 3)

        fill = QColor(color)
        fill.setAlpha(FILL_ALPHA)
        painter.setBrush(QBrush(fill))
        painter.setPen(QPen(color, 2))
        painter.drawRoundedRect(r, CORNER_R, CORNER_R)

        painter.setFont(self._label_font)
        painter.setPen(QPen(color))
        lines = wrap_label(node.label, self._label_metrics.horizontalAdvance,
                           NODE_W - LABEL_PAD * 2)
        painter.save()
        painter.setClipRect(r)
        for i, line in enumerate(lines):
            line_y = r.center().y() + (i - (len(lines) - 1) / 2) * LABEL_LINE_H
            painter.drawText(QRectF(r.left(), line_y - LABEL_LINE_H / 2,
                                    NODE_W, LABEL_LINE_H),
                             Qt.AlignCenter, line)
        painter.restore()

    def _draw_action_buttons(self, painter: QPainter, node: MindMapNode) -> None:
        painter.setFont(QFont("Segoe UI", 7))
        for kind, c in self._action_buttons(node):
            col = C_BTN_LINK if kind == _Hit.LINK_BTN else C_BTN_DELETE
            painter.setBrush(QBrush(col))
            painter.setPen(Qt.NoPen)
            painter.drawEllipse(c, BTN_R, BTN_R)
            painter.setPen(QPen(C_BTN_TEXT))
            glyph = "⛓" if kind == _Hit.LINK_BTN else "✕"
            painter.drawText(QRectF(c.x() - BTN_R, c.y() - BTN_R, BTN_R * 2, BTN_R * 2),
                             Qt.AlignCenter, glyph)

    def _draw_palette(self, painter: QPainter, node: MindMapNode) -> None:
        painter.setBrush(QBrush(C_PALETTE_BG))
        painter.setPen(QPen(C_PALETTE_EDGE))
        painter.drawRoundedRect(self._palette_rect(node), 4, 4)
        for color, c in self._palette_swatches(node):
            painter.setBrush(QBrush(QColor(color)))
            edge = C_TEXT if color == node.color else C_PALETTE_EDGE
            painter.setPen(QPen(edge, 2))
            painter.drawEllipse(c, SWATCH_R, SWATCH_R)

    def _draw_guide(self, painter: QPainter) -> None:
        font = QFont("Segoe UI", 8)
        fm = QFontMetricsF(font)
        w = min(self.width() - 20, fm.horizontalAdvance(GUIDE_TEXT) + 24)
        box = QRectF((self.width() - w) / 2, self.height() - 56, w, 40)
        painter.setBrush(QBrush(C_GUIDE_BG))
        painter.setPen(QPen(C_PALETTE_EDGE))
        painter.drawRoundedRect(box, 6, 6)
        bold = QFont("Segoe UI", 8)
        bold.setBold(True)
        painter.setFont(bold)
        painter.setPen(QPen(C_TEXT))
        painter.drawText(box.adjusted(0, 4, 0, -20), Qt.AlignCenter, "Quick Guide")
        painter.setFont(font)
        painter.setPen(QPen(C_TEXT_DIM))
        painter.drawText(box.adjusted(8, 20, -8, -2),
                         Qt.AlignCenter | Qt.TextWordWrap, GUIDE_TEXT)

    # -----------------------------------------------------------------------
    # Mouse events
    # -----------------------------------------------------------------------

    def mousePressEvent(self, event: QMouseEvent) -> None:
        scene_pos = self.view_to_scene(QPointF(event.position()))

        if event.button() == Qt.MiddleButton:
            self._begin_pan(event)
            return
        if event.button() != Qt.LeftButton:
            return

        hit = self.hit_test(scene_pos)
        ctl = self.controller

        if hit.kind == _Hit.SWATCH:
            self.model.update_node_color(hit.node.id, hit.color)
            return

        if hit.kind == _Hit.LINK_BTN:
            ctl.start_connect(hit.node.id)
            self.connect_mode_changed.emit()
            self.update()
            return

        if hit.kind == _Hit.DELETE_BTN:
            self._delete_node(hit.node.id)
            return

        if hit.kind == _Hit.NODE_BODY:
            if ctl.connecting_from is not None:
                ctl.click(hit.node.id)
                self.connect_mode_changed.emit()
                self.update()
            else:
                ctl.press(hit.node.id, (scene_pos.x(), scene_pos.y()))
            return

        if hit.kind == _Hit.CONN_DELETE:
            self.model.delete_connection(hit.conn.from_node, hit.conn.to_node)
            return

        # Empty space: scroll
        self.model.select(None)
        self._begin_pan(event)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        scene_pos = self.view_to_scene(QPointF(event.position()))

        if self._pan_start is not None:
            delta = event.position() - self._pan_start
            self._set_origin(QPointF(
                self._pan_origin_start.x() - delta.x() / self._scale,
                self._pan_origin_start.y() - delta.y() / self._scale,
            ))
            return

        if self.controller.move((scene_pos.x(), scene_pos.y())):
            return

        # Hover
        node = self._node_under(scene_pos)
        new_hover = node.id if node else None
        hit = self.hit_test(scene_pos)
        new_conn = hit.conn if hit.kind == _Hit.CONN_DELETE else None
        if new_hover != self._hover_node_id or new_conn is not self._hover_conn:
            self._hover_node_id = new_hover
            self._hover_conn = new_conn
            self.update()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if self._pan_start is not None and event.button() in (Qt.LeftButton, Qt.MiddleButton):
            self._end_pan()
            return
        if event.button() == Qt.LeftButton:
            node_id = self.controller.dragging_id
            if self.controller.release():
                self.drag_finished.emit(node_id)

    def mouseDoubleClickEvent(self, event: QMouseEvent) -> None:
        if event.button() != Qt.LeftButton:
            return
        hit = self.hit_test(self.view_to_scene(QPointF(event.position())))
        if hit.kind == _Hit.NODE_BODY:
            node = self.controller.double_click(hit.node.id)
            if node is not None:
                self.edit_requested.emit(node.id)

    def leaveEvent(self, event) -> None:
        node_id = self.controller.dragging_id
        if self.controller.leave():
            self.drag_finished.emit(node_id)
        self._end_pan()
        self._hover_node_id = None
        self._hover_conn = None
        self.update()
        super().leaveEvent(event)

    def wheelEvent(self, event: QWheelEvent) -> None:
        delta = event.angleDelta().y()
        if delta == 0:
            return
        factor = ZOOM_STEP if delta > 0 else 1 / ZOOM_STEP
        self.set_zoom(self._scale * factor, QPointF(event.position()))

    def _begin_pan(self, event: QMouseEvent) -> None:
        self._scroll_anim.stop()
        self._pan_start = QPointF(event.position())
        self._pan_origin_start = QPointF(self._origin)
        self.setCursor(Qt.ClosedHandCursor)

    def _end_pan(self) -> None:
        if self._pan_start is None:
            return
        self._pan_start = None
        self._pan_origin_start = None
        self.unsetCursor()

    # -----------------------------------------------------------------------
    # Keyboard
    # -----------------------------------------------------------------------

    def keyPressEvent(self, event: QKeyEvent) -> None:
        key = event.key()
        if key in (Qt.Key_Delete, Qt.Key_Backspace) and self.model.selected_id:
            self._delete_node(self.model.selected_id)
        elif key == Qt.Key_Escape and self.controller.connecting_from is not None:
            self.cancel_link()
        elif key == Qt.Key_F:
            self.show_all()
        else:
            super().keyPressEvent(event)

    # -----------------------------------------------------------------------
    # Model hooks
    # -----------------------------------------------------------------------

    def _delete_node(self, node_id: str) -> None:
        if node_id == ROOT_ID:
            self.status_message.emit("Cannot delete the root node")
            return
        if self.controller.connecting_from == node_id:
            self.controller.cancel_connect()
            self.connect_mode_changed.emit()
        if self.controller.dragging_id == node_id:
            self.controller.release()
        if self._hover_node_id == node_id:
            self._hover_node_id = None
        self.model.delete_node(node_id)

    def _on_model_changed(self, source=None) -> None:
        if source in ('clear', 'undo', 'import', 'load'):
            self.controller.cancel_connect()
            self.controller.release()
            self._hover_node_id = None
            self._hover_conn = None
        self.update()


# ---------------------------------------------------------------------------
# Geometry helpers
# ---------------------------------------------------------------------------

def _dist(a: QPointF, b: QPointF) -> float:
    d = a - b
    return (d.x() ** 2 + d.y() ** 2) ** 0.5
