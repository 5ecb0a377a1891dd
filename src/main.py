import argparse
import os
import sys

# High-DPI setup must happen before creating QApplication.
os.environ.setdefault("QT_ENABLE_HIGHDPI_SCALING", "1")
os.environ.setdefault("QT_SCALE_FACTOR_ROUNDING_POLICY", "PassThrough")

from PySide6.QtCore import QUrl
from PySide6.QtGui import QDesktopServices
from PySide6.QtWidgets import QApplication, QSystemTrayIcon

try:
    from core.config_manager import AppConfig, ConfigManager
    from core.logger import setup_logger
    from core.paths import get_base_dir, get_log_dir, get_ponies_dir, resolve_config_path
    from core.pony_loader import PonyLoader, PonyPack
    from core.pony_session import PonySession
    from core.scheduler import QtScheduler
    from ui.pony_window import PonyWindow
    from ui.tray_icon import SystemTrayManager
except ModuleNotFoundError:
    from .core.config_manager import AppConfig, ConfigManager
    from .core.logger import setup_logger
    from .core.paths import get_base_dir, get_log_dir, get_ponies_dir, resolve_config_path
    from .core.pony_loader import PonyLoader, PonyPack
    from .core.pony_session import PonySession
    from .core.scheduler import QtScheduler
    from .ui.pony_window import PonyWindow
    from .ui.tray_icon import SystemTrayManager


class PonyLauncher:
    """Opens independent pony windows, each with its own session."""

    def __init__(self, config: AppConfig, scheduler: QtScheduler, logger):
        self._config = config
        self._scheduler = scheduler
        self._logger = logger
        self._open: list[tuple[PonyWindow, PonySession]] = []

    @property
    def open_count(self) -> int:
        return len(self._open)

    def open_pony(self, pack: PonyPack) -> None:
        appearance = self._config.appearance
        window = PonyWindow(pack, width=appearance.window_width)
        session = PonySession(
            self._scheduler,
            self._config.shake,
            self._config.interaction,
            name=pack.name,
        )
        session.state_changed.connect(window.show_state)
        session.boop_enabled_changed.connect(window.set_boop_enabled)
        session.close_requested.connect(window.close)
        window.boop_clicked.connect(session.boop)
        window.cutie_mark_clicked.connect(session.cutie_mark_clicked)
        window.titlebar_interaction.connect(session.titlebar_interaction)
        window.close_clicked.connect(session.request_close)
        window.closed.connect(lambda w=window, s=session: self._on_closed(w, s))

        offset = 30 * len(self._open)
        window.move(appearance.start_x + offset, appearance.start_y + offset)
        window.show()
        session.attach(window)
        self._open.append((window, session))
        self._logger.info("[Launcher] opened pony %s", pack.name)

    def close_all(self) -> None:
        for window, _session in list(self._open):
            window.close()

    def _on_closed(self, window: PonyWindow, session: PonySession) -> None:
        session.close()
        self._open = [(w, s) for w, s in self._open if w is not window]
        window.deleteLater()
        session.deleteLater()


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Boop the pony.")
    parser.add_argument("--pony", default="", help="Pony name to open on start")
    parser.add_argument("--debug", action="store_true", help="Verbose console logging")
    args, _qt_args = parser.parse_known_args(argv[1:])
    return args


def main() -> int:
    args = _parse_args(sys.argv)
    app = QApplication(sys.argv)
    app.setApplicationName("BoopPony")

    config_path = resolve_config_path()
    config_manager = ConfigManager(config_path)
    config = config_manager.load()
    logger = setup_logger(get_log_dir(), debug=args.debug or config.behavior.debug_mode)
    logger.info("Application starting. base_dir=%s config=%s", get_base_dir(), config_path)

    loader = PonyLoader(get_ponies_dir(config.behavior.ponies_dir))
    packs = loader.scan()
    if not packs:
        logger.error("No pony packs found in %s", loader.ponies_dir)
        return 1

    scheduler = QtScheduler()
    launcher = PonyLauncher(config, scheduler, logger)

    tray_manager: SystemTrayManager | None = None
    if QSystemTrayIcon.isSystemTrayAvailable():
        tray_manager = SystemTrayManager(app)
        tray_manager.update_ponies(loader.names())

        def _open_by_name(name: str) -> None:
            pack = loader.get(name)
            if pack is None:
                return
            launcher.open_pony(pack)
            if config_manager.remember_default_pony(config, pack.name):
                logger.info("[Config] default pony set to %s", pack.name)

        def _open_logs() -> None:
            QDesktopServices.openUrl(QUrl.fromLocalFile(str(get_log_dir())))

        tray_manager.pony_open_requested.connect(_open_by_name)
        tray_manager.close_all_requested.connect(launcher.close_all)
        tray_manager.open_logs_requested.connect(_open_logs)
        tray_manager.quit_requested.connect(app.quit)
        tray_manager.show()
        app.setQuitOnLastWindowClosed(False)

    first_name = args.pony or config.appearance.default_pony
    first = loader.get(first_name) if first_name else None
    if first_name and first is None:
        logger.warning("Unknown pony %s; opening %s", first_name, packs[0].name)
    launcher.open_pony(first or packs[0])

    def _shutdown() -> None:
        launcher.close_all()
        if tray_manager is not None:
            tray_manager.hide()
        logger.info("Application exiting.")

    app.aboutToQuit.connect(_shutdown)
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
