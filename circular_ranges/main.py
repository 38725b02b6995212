from __future__ import annotations

import argparse
import faulthandler
import logging
import sys
from typing import Optional, Sequence, cast

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QPalette
from PySide6.QtWidgets import QApplication

from circular_ranges.models.errors import ConfigurationError
from circular_ranges.ui.clock_window import ClockWindow
from circular_ranges.utils.config import EditorConfig, load_config

faulthandler.enable()

logger = logging.getLogger(__name__)


def set_dark_theme(app: QApplication) -> None:
    """Apply a dark theme to the application."""
    app.setStyle("Fusion")

    palette = QPalette()
    palette.setColor(QPalette.ColorRole.Window, QColor(17, 17, 17))
    palette.setColor(QPalette.ColorRole.WindowText, Qt.GlobalColor.white)
    palette.setColor(QPalette.ColorRole.Base, QColor(28, 28, 28))
    palette.setColor(QPalette.ColorRole.AlternateBase, QColor(38, 38, 38))
    palette.setColor(QPalette.ColorRole.Text, Qt.GlobalColor.white)
    palette.setColor(QPalette.ColorRole.Button, QColor(43, 43, 43))
    palette.setColor(QPalette.ColorRole.ButtonText, Qt.GlobalColor.white)
    palette.setColor(QPalette.ColorRole.Highlight, QColor(42, 130, 218))
    palette.setColor(QPalette.ColorRole.HighlightedText, Qt.GlobalColor.black)
    palette.setColor(
        QPalette.ColorGroup.Disabled, QPalette.ColorRole.ButtonText, QColor(115, 115, 115)
    )
    app.setPalette(palette)


def build_config(config_path: Optional[str], min_separation: Optional[float]) -> EditorConfig:
    config = load_config(config_path) if config_path else EditorConfig()
    if min_separation is not None:
        data = config.to_dict()
        data["min_separation"] = min_separation
        config = EditorConfig.from_dict(data)
    return config


def run_app(config: EditorConfig, argv: Sequence[str] | None = None) -> int:
    """Create the QApplication and show the clock window."""
    existing_app = QApplication.instance()
    app = existing_app or QApplication(list(argv) if argv is not None else sys.argv)

    set_dark_theme(cast(QApplication, app))

    window = ClockWindow(config)
    window.resize(720, 420)
    window.show()
    return app.exec()


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="circular-ranges", description="Edit non-overlapping ranges on a 24 hour dial"
    )
    parser.add_argument("--config", help="JSON file with editor settings")
    parser.add_argument(
        "--min-separation",
        type=float,
        default=None,
        help="Minimum gap between any two range boundaries, in seconds",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )

    args, remaining = parser.parse_known_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = build_config(args.config, args.min_separation)
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    return run_app(config, remaining if remaining else None)


if __name__ == "__main__":
    raise SystemExit(main())
