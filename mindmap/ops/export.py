"""Export operations for JSON, PNG and SVG.

All three read a snapshot of the GraphStore and never mutate it.  PNG
rendering needs a QGuiApplication (for fonts); JSON and SVG do not.
"""

import json
import logging
import time
from pathlib import Path
from xml.sax.saxutils import escape, quoteattr

from ..errors import ExportError
from ..graph_editor.graph_model import GraphStore, NODE_W, NODE_H

log = logging.getLogger(__name__)

FORMATS = ('json', 'png', 'svg')

PADDING = 50
CORNER_R = 8
LINE_W = 2
WIRE_ALPHA = 0.6
FILL_ALPHA_HEX = '20'        # SVG: appended to the node colour (#RRGGBBAA)
FILL_ALPHA = 0x20            # PNG: same alpha; Qt reads 8-digit hex as #AARRGGBB
FONT_FAMILY = 'Arial'
FONT_PX = 12
LINE_H = 14
WRAP_W = 90                  # ~90% of NODE_W


def export_bounds(nodes, padding: float = PADDING):
    """Bounding box over all node rectangles plus padding.

    Returns (min_x, min_y, width, height).  Raises ExportError for an
    empty node list.
    """
    if not nodes:
        raise ExportError("Cannot export a mind map with no nodes")
    min_x = min(n.x for n in nodes) - padding
    min_y = min(n.y for n in nodes) - padding
    max_x = max(n.x + NODE_W for n in nodes) + padding
    max_y = max(n.y + NODE_H for n in nodes) + padding
    return min_x, min_y, max_x - min_x, max_y - min_y


def wrap_label(text: str, measure, max_width: float = WRAP_W) -> list[str]:
    """Greedy word wrap.

    measure(str) -> width.  Words accumulate while the line fits within
    max_width; a single word wider than max_width gets a line of its own.
    """
    lines = []
    current = ''
    for word in text.split(' '):
        candidate = f"{current} {word}" if current else word
        if measure(candidate) > max_width:
            if current:
                lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


def export_filename(fmt: str, now_ms: int = None) -> str:
    if fmt not in FORMATS:
        raise ExportError(f"Unknown export format {fmt!r}")
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"mindmap-{now_ms}.{fmt}"


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

def to_json(store: GraphStore) -> str:
    return json.dumps(store.to_dict(), indent=2)


# ---------------------------------------------------------------------------
# PNG
# ---------------------------------------------------------------------------

def render_png(store: GraphStore) -> bytes:
    """Rasterise the mind map to PNG bytes."""
    from PySide6.QtCore import Qt, QRectF, QPointF, QBuffer, QByteArray, QIODevice
    from PySide6.QtGui import QImage, QPainter, QPen, QColor, QFont, QFontMetricsF

    min_x, min_y, width, height = export_bounds(store.nodes)

    image = QImage(int(round(width)), int(round(height)), QImage.Format_ARGB32)
    image.fill(QColor('#ffffff'))

    painter = QPainter(image)
    try:
        painter.setRenderHint(QPainter.Antialiasing)
        painter.setRenderHint(QPainter.TextAntialiasing)

        # Connections
        for conn in store.connections:
            ends = store.connection_endpoints(conn)
            if ends is None:
                continue
            src, dst = ends
            col = QColor(src.color)
            col.setAlphaF(WIRE_ALPHA)
            painter.setPen(QPen(col, LINE_W))
            sx, sy = src.center()
            dx, dy = dst.center()
            painter.drawLine(QPointF(sx - min_x, sy - min_y),
                             QPointF(dx - min_x, dy - min_y))

        font = QFont(FONT_FAMILY)
        font.setPixelSize(FONT_PX)
        font.setBold(True)
        fm = QFontMetricsF(font)

        # Nodes
        for node in store.nodes:
            x = node.x - min_x
            y = node.y - min_y
            rect = QRectF(x, y, NODE_W, NODE_H)
            fill = QColor(node.color)
            fill.setAlpha(FILL_ALPHA)
            painter.setBrush(fill)
            painter.setPen(QPen(QColor(node.color), LINE_W))
            painter.drawRoundedRect(rect, CORNER_R, CORNER_R)

            painter.setFont(font)
            painter.setPen(QPen(QColor(node.color)))
            lines = wrap_label(node.label, fm.horizontalAdvance)
            for i, line in enumerate(lines):
                line_y = y + NODE_H / 2 + (i - (len(lines) - 1) / 2) * LINE_H
                painter.drawText(QRectF(x, line_y - LINE_H / 2, NODE_W, LINE_H),
                                 Qt.AlignCenter, line)
    finally:
        painter.end()

    data = QByteArray()
    buf = QBuffer(data)
    buf.open(QIODevice.WriteOnly)
    image.save(buf, "PNG")
    buf.close()
    return data.data()


# ---------------------------------------------------------------------------
# SVG
# ---------------------------------------------------------------------------

def _num(v: float) -> str:
    """Compact number formatting: 12.0 -> '12', 12.5 -> '12.5'."""
    return f"{v:g}"


def render_svg(store: GraphStore) -> str:
    """Render the mind map as SVG markup.

    Labels are emitted as a single <text> element each (no wrapping).
    """
    min_x, min_y, width, height = export_bounds(store.nodes)
    w, h = _num(width), _num(height)

    out = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{w}" height="{h}" '
        f'viewBox="0 0 {w} {h}">',
        f'<rect width="{w}" height="{h}" fill="white"/>',
    ]

    for conn in store.connections:
        ends = store.connection_endpoints(conn)
        if ends is None:
            continue
        src, dst = ends
        sx, sy = src.center()
        dx, dy = dst.center()
        out.append(
            f'<line x1="{_num(sx - min_x)}" y1="{_num(sy - min_y)}" '
            f'x2="{_num(dx - min_x)}" y2="{_num(dy - min_y)}" '
            f'stroke={quoteattr(src.color)} stroke-width="{LINE_W}" '
            f'opacity="{WIRE_ALPHA}"/>'
        )

    for node in store.nodes:
        x = node.x - min_x
        y = node.y - min_y
        out.append(
            f'<rect x="{_num(x)}" y="{_num(y)}" width="{NODE_W}" height="{NODE_H}" '
            f'rx="{CORNER_R}" fill={quoteattr(node.color + FILL_ALPHA_HEX)} '
            f'stroke={quoteattr(node.color)} stroke-width="{LINE_W}"/>'
        )
        out.append(
            f'<text x="{_num(x + NODE_W / 2)}" y="{_num(y + NODE_H / 2)}" '
            f'text-anchor="middle" dominant-baseline="middle" '
            f'fill={quoteattr(node.color)} font-family="{FONT_FAMILY}" '
            f'font-size="{FONT_PX}" font-weight="bold">{escape(node.label)}</text>'
        )

    out.append('</svg>')
    return '\n'.join(out)


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

def render(store: GraphStore, fmt: str):
    """Return the export payload for fmt: str for json/svg, bytes for png."""
    if fmt == 'json':
        return to_json(store)
    if fmt == 'png':
        return render_png(store)
    if fmt == 'svg':
        return render_svg(store)
    raise ExportError(f"Unknown export format {fmt!r}")


def write_export(store: GraphStore, fmt: str, path) -> Path:
    """Render fmt and write it to path. Raises ExportError / OSError."""
    path = Path(path)
    payload = render(store, fmt)
    if isinstance(payload, bytes):
        path.write_bytes(payload)
    else:
        path.write_text(payload, encoding='utf-8')
    log.info("Exported %s (%d nodes, %d connections) to %s",
             fmt, len(store.nodes), len(store.connections), path)
    return path


def export_to_file(store: GraphStore, fmt: str, directory) -> Path:
    """Write fmt into directory under a timestamped mindmap-<ms> name."""
    return write_export(store, fmt, Path(directory) / export_filename(fmt))
