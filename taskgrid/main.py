from __future__ import annotations

import sys
from datetime import timedelta
from pathlib import Path

from PySide6.QtGui import QFont
from PySide6.QtWidgets import QApplication, QMessageBox, QStyleFactory

from taskgrid.config import SETTINGS
from taskgrid.infra.db import init_db
from taskgrid.infra.logging import setup_logging
from taskgrid.infra.repository import TaskRepository
from taskgrid.services.calendar_service import CalendarService
from taskgrid.services.projection import EventProjector
from taskgrid.ui.main_window import MainWindow
from taskgrid.ui.theme import apply_theme


def build_service() -> CalendarService:
    projector = EventProjector(
        default_duration=timedelta(minutes=SETTINGS.default_duration_min),
        max_occurrences=SETTINGS.max_occurrences,
    )
    export_path = Path(SETTINGS.ics_export_path) if SETTINGS.ics_export_path else None
    service = CalendarService(TaskRepository(), projector=projector, ics_export_path=export_path)
    service.load()
    return service


def main() -> None:
    setup_logging()
    app = QApplication(sys.argv)
    try:
        init_db()
        service = build_service()
    except Exception as exc:  # noqa: BLE001
        QMessageBox.critical(None, "DB error", str(exc))
        return

    app.setStyle(QStyleFactory.create("Fusion"))
    apply_theme(app, service.state.dark_mode)
    app.setFont(QFont("Segoe UI", 10))

    window = MainWindow(service, week_start=SETTINGS.week_start)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
