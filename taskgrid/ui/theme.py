from __future__ import annotations

from PySide6.QtGui import QColor, QPalette
from PySide6.QtWidgets import QApplication

DARK_COLORS = {
    QPalette.Window: "#0F172A",
    QPalette.WindowText: "#E6EDF3",
    QPalette.Base: "#111827",
    QPalette.AlternateBase: "#1B2230",
    QPalette.Text: "#E6EDF3",
    QPalette.Button: "#202A3B",
    QPalette.ButtonText: "#E6EDF3",
    QPalette.ToolTipBase: "#1B2230",
    QPalette.ToolTipText: "#E6EDF3",
    QPalette.Highlight: "#2563EB",
    QPalette.HighlightedText: "#FFFFFF",
}

LIGHT_COLORS = {
    QPalette.Window: "#F9FAFB",
    QPalette.WindowText: "#111827",
    QPalette.Base: "#FFFFFF",
    QPalette.AlternateBase: "#F3F4F6",
    QPalette.Text: "#111827",
    QPalette.Button: "#E5E7EB",
    QPalette.ButtonText: "#111827",
    QPalette.ToolTipBase: "#FFFFFF",
    QPalette.ToolTipText: "#111827",
    QPalette.Highlight: "#2563EB",
    QPalette.HighlightedText: "#FFFFFF",
}


def apply_theme(app: QApplication, dark: bool) -> None:
    palette = QPalette()
    for role, color in (DARK_COLORS if dark else LIGHT_COLORS).items():
        palette.setColor(role, QColor(color))
    app.setPalette(palette)
