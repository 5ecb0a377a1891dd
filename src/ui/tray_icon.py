from __future__ import annotations

from typing import Callable, Iterable

from PySide6.QtCore import QObject, Signal
from PySide6.QtGui import QAction, QIcon
from PySide6.QtWidgets import QApplication, QMenu, QStyle, QSystemTrayIcon


class SystemTrayManager(QObject):
    """System tray icon with the pony picker menu."""

    pony_open_requested = Signal(str)
    close_all_requested = Signal()
    open_logs_requested = Signal()
    quit_requested = Signal()

    def __init__(self, app: QApplication, icon_path: str | None = None):
        super().__init__(app)
        icon = QIcon(icon_path) if icon_path else app.style().standardIcon(QStyle.StandardPixmap.SP_ComputerIcon)
        self._tray = QSystemTrayIcon(icon, app)
        self._menu = QMenu()
        self._pony_menu = self._menu.addMenu("Open pony")
        self._build_actions()
        self._tray.setContextMenu(self._menu)
        self._tray.setToolTip("Boop Pony")

    def _add_action(
        self,
        text: str,
        handler: Callable[[], None],
        *,
        menu: QMenu | None = None,
        enabled: bool = True,
    ) -> QAction:
        target_menu = menu or self._menu
        action = target_menu.addAction(text)
        action.setEnabled(enabled)
        action.triggered.connect(lambda _checked=False, cb=handler: cb())
        return action

    def _build_actions(self) -> None:
        self._add_action("Close all ponies", self.close_all_requested.emit)
        self._menu.addSeparator()
        self._add_action("Open logs folder", self.open_logs_requested.emit)
        self._menu.addSeparator()
        self._add_action("Quit", self.quit_requested.emit)

    def update_ponies(self, names: Iterable[str]) -> None:
        """Rebuild the pony submenu from loaded pack names."""
        self._pony_menu.clear()
        for name in names:
            if not name.strip():
                continue
            self._add_action(
                name,
                lambda pony=name: self.pony_open_requested.emit(pony),
                menu=self._pony_menu,
            )
        if not self._pony_menu.actions():
            self._add_action("No ponies found", lambda: None, menu=self._pony_menu, enabled=False)

    def show(self) -> None:
        self._tray.show()

    def hide(self) -> None:
        self._tray.hide()
