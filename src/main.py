import os
import sys

from PyQt6.QtWidgets import QApplication, QStyleFactory

from common.log_utils import log_info
from frontend.main_window import MainWindow
from frontend.widgets import style as ui_style


def _apply_style(app: QApplication) -> None:
    available = [str(s) for s in QStyleFactory.keys()]
    prefer = os.environ.get("QT_STYLE_OVERRIDE") or os.environ.get("QT_STYLE") or "Fusion"
    if prefer not in available and available:
        prefer = available[0] if "Fusion" not in available else "Fusion"
    style = QStyleFactory.create(prefer)
    if style is not None:
        app.setStyle(style)
    ui_style.apply_app_style(app)


def main() -> int:
    app = QApplication(sys.argv)
    app.setApplicationName("driftpick")
    _apply_style(app)

    window = MainWindow()
    window.show()
    files = [arg for arg in sys.argv[1:] if not arg.startswith("-")]
    if files:
        log_info(f"Opening {len(files)} files from the command line", "UI")
        window.open_files(files)
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
