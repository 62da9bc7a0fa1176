from __future__ import annotations

from datetime import date, time, timedelta

from PySide6.QtCore import QMimeData, QSize, Qt, Signal
from PySide6.QtGui import QColor, QDrag
from PySide6.QtWidgets import (
    QAbstractItemView,
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QSizePolicy,
    QVBoxLayout,
    QWidget,
)

from taskgrid.domain.colors import resolve_color
from taskgrid.domain.entities import OccurrenceEntity, TaskEntity
from taskgrid.domain.enums import Priority

PRIORITY_OPTIONS = [
    ("Низький", Priority.LOW.value),
    ("Середній", Priority.MEDIUM.value),
    ("Високий", Priority.HIGH.value),
]

WEEKDAY_LABELS = ["Пн", "Вт", "Ср", "Чт", "Пт", "Сб", "Нд"]

MIME_PREFIX = "occurrence:"


def _occurrence_id_from_mime(mime: QMimeData) -> str | None:
    if not mime.hasText():
        return None
    text = mime.text()
    if not text.startswith(MIME_PREFIX):
        return None
    return text.split(":", 1)[1] or None


def _format_dates(task: TaskEntity) -> str:
    if not task.start_date:
        return "Без дати"
    label = task.start_date.strftime("%d.%m.%Y")
    if task.start_time:
        label += f" {task.start_time}"
    if task.end_date and task.end_date != task.start_date:
        label += f" - {task.end_date.strftime('%d.%m.%Y')}"
    if task.end_time:
        label += f" {task.end_time}" if task.end_date else f"-{task.end_time}"
    return label


class TaskItemWidget(QWidget):
    def __init__(self, task: TaskEntity):
        super().__init__()
        self.task = task

        self.setObjectName("TaskCard")
        self.setAttribute(Qt.WA_StyledBackground, True)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Fixed)
        self.setMinimumHeight(56)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 8, 12, 8)
        layout.setSpacing(4)

        title_text = task.title.strip() if task.title else "Без назви"
        title = QLabel(title_text)
        title.setProperty("class", "task-title")
        title.setWordWrap(True)
        if task.completed:
            font = title.font()
            font.setStrikeOut(True)
            title.setFont(font)

        meta_parts = [_format_dates(task)]
        if task.is_recurring:
            meta_parts.append(f"Повтор: {task.recurrence_type.value} x{task.recurrence_interval}")
        meta = QLabel(" | ".join(meta_parts))
        meta.setProperty("class", "task-meta")
        meta.setWordWrap(True)

        priority_label = next(
            (label for label, value in PRIORITY_OPTIONS if value == task.priority),
            "Середній",
        )
        priority = QLabel(priority_label)
        priority.setProperty("class", "task-priority")
        priority.setStyleSheet(
            f"background-color: {resolve_color(task)}; color: #ffffff;"
            " border-radius: 6px; padding: 2px 6px;"
        )
        priority.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Fixed)

        header = QHBoxLayout()
        header.setSpacing(8)
        header.addWidget(title, 1)
        header.addWidget(priority, 0, Qt.AlignTop)

        layout.addLayout(header)
        layout.addWidget(meta)


class TaskListWidget(QListWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.setSpacing(6)

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self.sync_item_sizes()

    def set_tasks(self, tasks: list[TaskEntity]) -> None:
        self.clear()
        for task in tasks:
            item = QListWidgetItem()
            item.setData(Qt.UserRole, task.id)
            widget = TaskItemWidget(task)
            self.addItem(item)
            self.setItemWidget(item, widget)
            item.setSizeHint(widget.sizeHint())
        self.sync_item_sizes()

    def sync_item_sizes(self) -> None:
        viewport_width = self.viewport().width()
        for index in range(self.count()):
            item = self.item(index)
            widget = self.itemWidget(item)
            if widget:
                widget.setFixedWidth(viewport_width)
                widget.adjustSize()
                item.setSizeHint(QSize(viewport_width, widget.sizeHint().height()))


class OccurrenceListWidget(QListWidget):
    """Chips of one calendar day; chips drag to other days."""

    occurrence_dropped = Signal(str)
    occurrence_clicked = Signal(str)
    occurrence_menu = Signal(str, object)
    empty_clicked = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setDragEnabled(True)
        self.setAcceptDrops(True)
        self.setDropIndicatorShown(False)
        self.setDragDropMode(QAbstractItemView.DragDrop)
        self.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.setFrameShape(QFrame.NoFrame)
        self.setContextMenuPolicy(Qt.CustomContextMenu)
        self.setSpacing(1)
        self.itemClicked.connect(self._handle_item_clicked)
        self.customContextMenuRequested.connect(self._handle_menu)

    def add_occurrence(self, occurrence: OccurrenceEntity) -> None:
        label = occurrence.title
        if not occurrence.all_day:
            label = f"{occurrence.start.strftime('%H:%M')} {label}"
        if occurrence.is_recurrence:
            label = f"↻ {label}"
        item = QListWidgetItem(label)
        item.setData(Qt.UserRole, occurrence.id)
        item.setBackground(QColor(occurrence.background_color))
        item.setForeground(QColor(occurrence.text_color))
        item.setToolTip(occurrence.title)
        self.addItem(item)

    def mouseDoubleClickEvent(self, event) -> None:  # type: ignore[override]
        pos = event.position().toPoint() if hasattr(event, "position") else event.pos()
        if self.itemAt(pos) is None:
            self.empty_clicked.emit()
            return
        super().mouseDoubleClickEvent(event)

    def startDrag(self, supportedActions: Qt.DropActions) -> None:  # type: ignore[override]
        item = self.currentItem()
        if not item:
            return
        occurrence_id = item.data(Qt.UserRole)
        if not occurrence_id:
            return
        mime = QMimeData()
        mime.setText(f"{MIME_PREFIX}{occurrence_id}")
        drag = QDrag(self)
        drag.setMimeData(mime)
        drag.exec(Qt.MoveAction)

    def dragEnterEvent(self, event) -> None:  # type: ignore[override]
        if _occurrence_id_from_mime(event.mimeData()) is not None:
            event.acceptProposedAction()

    def dragMoveEvent(self, event) -> None:  # type: ignore[override]
        if _occurrence_id_from_mime(event.mimeData()) is not None:
            event.acceptProposedAction()

    def dropEvent(self, event) -> None:  # type: ignore[override]
        occurrence_id = _occurrence_id_from_mime(event.mimeData())
        if occurrence_id is None:
            return
        event.acceptProposedAction()
        self.occurrence_dropped.emit(occurrence_id)

    def _handle_item_clicked(self, item: QListWidgetItem) -> None:
        self.occurrence_clicked.emit(item.data(Qt.UserRole))

    def _handle_menu(self, pos) -> None:
        item = self.itemAt(pos)
        if item is None:
            return
        self.occurrence_menu.emit(item.data(Qt.UserRole), self.mapToGlobal(pos))


class DayCellWidget(QFrame):
    def __init__(self, day: date, in_period: bool, parent=None):
        super().__init__(parent)
        self.day = day
        self.setObjectName("DayCell")
        self.setFrameShape(QFrame.StyledPanel)
        self.setProperty("today", day == date.today())
        self.setProperty("muted", not in_period)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 2, 4, 4)
        layout.setSpacing(2)

        header = QLabel(str(day.day))
        header.setProperty("class", "day-number")
        if day == date.today():
            font = header.font()
            font.setBold(True)
            header.setFont(font)
        if not in_period:
            header.setEnabled(False)

        self.occurrences = OccurrenceListWidget()
        layout.addWidget(header)
        layout.addWidget(self.occurrences, 1)


class CalendarGridWidget(QWidget):
    """Month/week/day grid of day cells filled with occurrences."""

    occurrence_moved = Signal(object, object)
    occurrence_clicked = Signal(object)
    occurrence_menu = Signal(object, object)
    date_clicked = Signal(object)

    MONTH = "month"
    WEEK = "week"
    DAY = "day"

    def __init__(self, week_start: int = 0, parent=None):
        super().__init__(parent)
        self.week_start = week_start
        self.view_mode = self.MONTH
        self.anchor = date.today()
        self._occurrences: dict[str, OccurrenceEntity] = {}
        self._cells: list[DayCellWidget] = []

        self._layout = QGridLayout(self)
        self._layout.setContentsMargins(0, 0, 0, 0)
        self._layout.setSpacing(2)

    def visible_range(self) -> tuple[date, date]:
        if self.view_mode == self.DAY:
            return self.anchor, self.anchor
        if self.view_mode == self.WEEK:
            first = self._week_start_of(self.anchor)
            return first, first + timedelta(days=6)
        first = self._week_start_of(self.anchor.replace(day=1))
        return first, first + timedelta(days=41)

    def period_label(self) -> str:
        first, last = self.visible_range()
        if self.view_mode == self.MONTH:
            return self.anchor.strftime("%m.%Y")
        if first == last:
            return first.strftime("%d.%m.%Y")
        return f"{first.strftime('%d.%m')} - {last.strftime('%d.%m.%Y')}"

    def set_view_mode(self, mode: str) -> None:
        self.view_mode = mode

    def step(self, direction: int) -> None:
        if self.view_mode == self.DAY:
            self.anchor += timedelta(days=direction)
        elif self.view_mode == self.WEEK:
            self.anchor += timedelta(weeks=direction)
        else:
            month_index = self.anchor.year * 12 + self.anchor.month - 1 + direction
            self.anchor = date(month_index // 12, month_index % 12 + 1, 1)

    def go_today(self) -> None:
        self.anchor = date.today()

    def set_occurrences(self, occurrences: list[OccurrenceEntity]) -> None:
        self._occurrences = {occurrence.id: occurrence for occurrence in occurrences}
        self._rebuild()

    def _week_start_of(self, day: date) -> date:
        return day - timedelta(days=(day.weekday() - self.week_start) % 7)

    def _rebuild(self) -> None:
        while self._layout.count():
            item = self._layout.takeAt(0)
            widget = item.widget()
            if widget:
                widget.deleteLater()
        self._cells = []

        first, last = self.visible_range()
        columns = 1 if self.view_mode == self.DAY else 7
        header_row = 0
        if columns == 7:
            for column in range(7):
                label = QLabel(WEEKDAY_LABELS[(self.week_start + column) % 7])
                label.setAlignment(Qt.AlignCenter)
                label.setProperty("class", "weekday")
                self._layout.addWidget(label, 0, column)
            header_row = 1

        days = (last - first).days + 1
        for offset in range(days):
            day = first + timedelta(days=offset)
            in_period = self.view_mode != self.MONTH or day.month == self.anchor.month
            cell = DayCellWidget(day, in_period)
            cell.occurrences.occurrence_dropped.connect(
                lambda occurrence_id, target=day: self._handle_drop(occurrence_id, target)
            )
            cell.occurrences.occurrence_clicked.connect(self._handle_click)
            cell.occurrences.occurrence_menu.connect(self._handle_menu)
            cell.occurrences.empty_clicked.connect(
                lambda target=day: self.date_clicked.emit(target)
            )
            self._layout.addWidget(cell, header_row + offset // columns, offset % columns)
            self._cells.append(cell)

        for occurrence in sorted(self._occurrences.values(), key=lambda item: (not item.all_day, item.start)):
            self._place(occurrence, first, last)

    def _place(self, occurrence: OccurrenceEntity, first: date, last: date) -> None:
        start_day = occurrence.start.date()
        end_day = occurrence.end.date()
        if occurrence.all_day or (occurrence.end.time() == time.min and end_day > start_day):
            end_day -= timedelta(days=1)
        end_day = max(end_day, start_day)
        for cell in self._cells:
            if start_day <= cell.day <= end_day:
                cell.occurrences.add_occurrence(occurrence)

    def _handle_drop(self, occurrence_id: str, target: date) -> None:
        occurrence = self._occurrences.get(occurrence_id)
        if occurrence is None or occurrence.start.date() == target:
            return
        self.occurrence_moved.emit(occurrence, target)

    def _handle_click(self, occurrence_id: str) -> None:
        occurrence = self._occurrences.get(occurrence_id)
        if occurrence is not None:
            self.occurrence_clicked.emit(occurrence)

    def _handle_menu(self, occurrence_id: str, global_pos) -> None:
        occurrence = self._occurrences.get(occurrence_id)
        if occurrence is not None:
            self.occurrence_menu.emit(occurrence, global_pos)
