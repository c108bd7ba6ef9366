"""EventGraph - node chain editor.

Usage:
    eventgraph [--settings PATH] [--log-level LEVEL]
    python -m eventgraph.main
"""
import argparse
import sys

from PySide6.QtWidgets import QApplication

from .core.log import configure_logging
from .core.settings import Settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='EventGraph - node chain editor')
    parser.add_argument('--settings', type=str, default=None,
                        help='Path to settings.json (default: ~/.config/eventgraph/settings.json)')
    parser.add_argument('--log-level', type=str, default=None,
                        help='Console log level, overrides the settings file (e.g. DEBUG)')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    settings = Settings(args.settings)
    configure_logging(args.log_level or settings.log_level, settings.log_dir or None)

    app = QApplication(sys.argv[:1])
    app.setStyle('Fusion')

    # Import here so the Qt application exists before any widget module loads
    from .graph_editor.graph_editor_window import GraphEditorWindow
    window = GraphEditorWindow(settings=settings)
    window.show()

    sys.exit(app.exec())


if __name__ == '__main__':
    main()
