from __future__ import annotations

from dataclasses import dataclass

from PySide6.QtCore import QPoint, QRectF, Qt, Signal
from PySide6.QtGui import QCloseEvent, QMouseEvent, QPainter, QPaintEvent, QPixmap
from PySide6.QtWidgets import QWidget

try:
    from core.motion import Position
    from core.pony_loader import PonyAsset, PonyPack
    from core.state_machine import DisplayState
except ModuleNotFoundError:
    from ..core.motion import Position
    from ..core.pony_loader import PonyAsset, PonyPack
    from ..core.state_machine import DisplayState


VIEWPORT_ASPECT_RATIO = 1594 / 1714

REGION_CLOSE = "close"
REGION_TITLEBAR = "titlebar"
REGION_BOOP = "boop"
REGION_CUTIE_MARK = "cutie_mark"


@dataclass(frozen=True, slots=True)
class HitRegion:
    """Rectangle in fractions of the window size."""

    name: str
    left: float
    top: float
    width: float
    height: float

    def contains(self, fx: float, fy: float) -> bool:
        return self.left <= fx < self.left + self.width and self.top <= fy < self.top + self.height


# First match wins; the close button sits inside the titlebar.
HIT_REGIONS: tuple[HitRegion, ...] = (
    HitRegion(REGION_CLOSE, 1.0 - 0.035 - 0.06, 0.12 * 0.2, 0.06, 0.12 * 0.5),
    HitRegion(REGION_TITLEBAR, 0.0, 0.0, 1.0, 0.12),
    HitRegion(REGION_BOOP, 0.4, 0.4, 0.2, 0.2),
    HitRegion(REGION_CUTIE_MARK, 1.0 - 0.1 - 0.1, 1.0 - 0.1 - 0.1, 0.1, 0.1),
)


def region_at(x: float, y: float, width: float, height: float, *, boop_enabled: bool = True) -> str | None:
    if width <= 0 or height <= 0:
        return None
    fx, fy = x / width, y / height
    for region in HIT_REGIONS:
        if region.name == REGION_BOOP and not boop_enabled:
            continue
        if region.contains(fx, fy):
            return region.name
    return None


def height_for_width(width: int) -> int:
    return int(round(width / VIEWPORT_ASPECT_RATIO))


class PonyWindow(QWidget):
    """
    Frameless pony popup: window frame, current state image, cutie mark.

    Purely a rendering/input collaborator; state decisions live in
    ``PonySession``.
    """

    boop_clicked = Signal()
    cutie_mark_clicked = Signal()
    close_clicked = Signal()
    titlebar_interaction = Signal()
    closed = Signal()

    def __init__(self, pack: PonyPack | None = None, width: int = 400, parent: QWidget | None = None):
        super().__init__(parent)
        self._pack = pack
        self._pixmaps: dict[PonyAsset, QPixmap] = {}
        self._state = DisplayState.RESTING
        self._boop_enabled = True
        self._press_region: str | None = None
        self._drag_active = False
        self._drag_offset = QPoint(0, 0)

        self.setWindowFlags(
            Qt.WindowType.FramelessWindowHint
            | Qt.WindowType.WindowStaysOnTopHint
            | Qt.WindowType.Tool
        )
        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground, True)
        self.setWindowTitle(f"Boop {pack.name}" if pack else "Boop The Pony")
        self.setFixedSize(width, height_for_width(width))
        self._load_pixmaps()

    @property
    def state(self) -> DisplayState:
        return self._state

    @property
    def boop_enabled(self) -> bool:
        return self._boop_enabled

    def screen_position(self) -> Position:
        top_left = self.frameGeometry().topLeft()
        return Position(top_left.x(), top_left.y())

    def show_state(self, state: DisplayState) -> None:
        self._state = state
        self.update()

    def set_boop_enabled(self, enabled: bool) -> None:
        self._boop_enabled = bool(enabled)
        self._update_cursor(None)

    def pixmap_for(self, asset: PonyAsset) -> QPixmap | None:
        return self._pixmaps.get(asset)

    def _load_pixmaps(self) -> None:
        if self._pack is None:
            return
        for asset in PonyAsset:
            data = self._pack.asset_bytes(asset)
            if not data:
                continue
            pixmap = QPixmap()
            if pixmap.loadFromData(data):
                self._pixmaps[asset] = pixmap

    def paintEvent(self, event: QPaintEvent) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform, True)
        state_asset = PonyAsset[self._state.name]
        layers = (PonyAsset.FRAME, state_asset, PonyAsset.CUTIE_MARK)
        if state_asset not in self._pixmaps:
            painter.setPen(Qt.GlobalColor.white)
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, "Loading...")
        for asset in layers:
            pixmap = self._pixmaps.get(asset)
            if pixmap is None or pixmap.isNull():
                continue
            scaled_height = self.width() * pixmap.height() / max(1, pixmap.width())
            painter.drawPixmap(QRectF(0, 0, self.width(), scaled_height), pixmap, QRectF(pixmap.rect()))
        painter.end()

    def _region_for(self, point: QPoint) -> str | None:
        return region_at(point.x(), point.y(), self.width(), self.height(), boop_enabled=self._boop_enabled)

    def _update_cursor(self, region: str | None) -> None:
        if region in {REGION_CLOSE, REGION_BOOP, REGION_CUTIE_MARK}:
            self.setCursor(Qt.CursorShape.PointingHandCursor)
        else:
            self.unsetCursor()

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return
        region = self._region_for(event.position().toPoint())
        self._press_region = region
        if region == REGION_TITLEBAR:
            self._drag_active = True
            self._drag_offset = event.globalPosition().toPoint() - self.frameGeometry().topLeft()
            self.titlebar_interaction.emit()
        event.accept()

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        if self._drag_active and (event.buttons() & Qt.MouseButton.LeftButton):
            self.move(event.globalPosition().toPoint() - self._drag_offset)
            self.titlebar_interaction.emit()
            event.accept()
            return
        self._update_cursor(self._region_for(event.position().toPoint()))
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if event.button() != Qt.MouseButton.LeftButton:
            super().mouseReleaseEvent(event)
            return
        pressed = self._press_region
        self._press_region = None
        if self._drag_active:
            self._drag_active = False
            self.titlebar_interaction.emit()
            event.accept()
            return
        if pressed is not None and pressed == self._region_for(event.position().toPoint()):
            self._emit_click(pressed)
        event.accept()

    def _emit_click(self, region: str) -> None:
        if region == REGION_BOOP:
            self.boop_clicked.emit()
        elif region == REGION_CUTIE_MARK:
            self.cutie_mark_clicked.emit()
        elif region == REGION_CLOSE:
            self.close_clicked.emit()

    def closeEvent(self, event: QCloseEvent) -> None:
        self.closed.emit()
        super().closeEvent(event)
