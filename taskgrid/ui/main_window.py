from __future__ import annotations

import logging
from datetime import date, datetime, time
from pathlib import Path

from PySide6.QtCore import Qt
from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QApplication,
    QCheckBox,
    QComboBox,
    QFileDialog,
    QFrame,
    QHBoxLayout,
    QLabel,
    QListWidgetItem,
    QMenu,
    QMessageBox,
    QPushButton,
    QSplitter,
    QVBoxLayout,
    QWidget,
)

from taskgrid.domain.entities import OccurrenceEntity, TaskEntity
from taskgrid.domain.enums import StatusFilter
from taskgrid.domain.errors import TaskNotFoundError, TaskValidationError
from taskgrid.domain.filters import TaskFilters
from taskgrid.services.calendar_service import CalendarService

from .dialogs import RescheduleDialog, TaskFormDialog
from .theme import apply_theme
from .widgets import PRIORITY_OPTIONS, CalendarGridWidget, TaskListWidget

logger = logging.getLogger(__name__)

STATUS_FILTERS = [
    ("Усі", StatusFilter.ALL),
    ("Активні", StatusFilter.ACTIVE),
    ("Виконані", StatusFilter.COMPLETED),
]

VIEW_MODES = [
    ("Місяць", CalendarGridWidget.MONTH),
    ("Тиждень", CalendarGridWidget.WEEK),
    ("День", CalendarGridWidget.DAY),
]


class MainWindow(QWidget):
    def __init__(self, service: CalendarService, week_start: int = 0):
        super().__init__()
        self.setWindowTitle("Taskgrid")
        self.resize(1280, 800)

        self.service = service
        self.filters = TaskFilters()

        main_layout = QHBoxLayout(self)
        main_layout.setContentsMargins(12, 12, 12, 12)

        splitter = QSplitter(Qt.Horizontal)
        main_layout.addWidget(splitter)

        self.sidebar = self._build_sidebar()
        self.center = self._build_center(week_start)

        splitter.addWidget(self.sidebar)
        splitter.addWidget(self.center)
        splitter.setStretchFactor(0, 0)
        splitter.setStretchFactor(1, 3)
        splitter.setSizes([320, 960])

        self.dark_mode_check.setChecked(self.service.state.dark_mode)
        self.dark_mode_check.toggled.connect(self.on_dark_mode_toggled)

        self.refresh()

        QShortcut(QKeySequence("Ctrl+N"), self, lambda: self.new_task())

    def _build_sidebar(self) -> QWidget:
        frame = QFrame()
        frame.setObjectName("Sidebar")
        layout = QVBoxLayout(frame)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(8)

        self.tasks_title = QLabel("Мої задачі")
        self.tasks_title.setProperty("class", "panel-title")
        layout.addWidget(self.tasks_title)

        self.status_combo = QComboBox()
        for label, key in STATUS_FILTERS:
            self.status_combo.addItem(label, key.value)
        self.status_combo.currentIndexChanged.connect(self.on_filter_change)

        self.priority_filter = QComboBox()
        self.priority_filter.addItem("Усі пріоритети", "all")
        for label, value in PRIORITY_OPTIONS:
            self.priority_filter.addItem(label, value)
        self.priority_filter.currentIndexChanged.connect(self.on_filter_change)

        layout.addWidget(QLabel("Статус"))
        layout.addWidget(self.status_combo)
        layout.addWidget(QLabel("Пріоритет"))
        layout.addWidget(self.priority_filter)

        self.task_list = TaskListWidget()
        self.task_list.setObjectName("TaskList")
        self.task_list.itemDoubleClicked.connect(self.on_task_double_clicked)
        layout.addWidget(self.task_list, 1)

        actions = QHBoxLayout()
        toggle_button = QPushButton("Виконано / Повернути")
        toggle_button.setProperty("variant", "secondary")
        toggle_button.clicked.connect(self.toggle_selected)

        delete_button = QPushButton("Видалити")
        delete_button.setProperty("variant", "danger")
        delete_button.clicked.connect(self.delete_selected)

        actions.addWidget(toggle_button, 1)
        actions.addWidget(delete_button)
        layout.addLayout(actions)
        return frame

    def _build_center(self, week_start: int) -> QWidget:
        frame = QFrame()
        frame.setObjectName("CenterPanel")
        layout = QVBoxLayout(frame)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(12)

        toolbar = QHBoxLayout()
        add_button = QPushButton("Нова задача")
        add_button.clicked.connect(lambda: self.new_task())

        prev_button = QPushButton("<")
        prev_button.setProperty("variant", "ghost")
        prev_button.clicked.connect(lambda: self.step_period(-1))

        today_button = QPushButton("Сьогодні")
        today_button.setProperty("variant", "secondary")
        today_button.clicked.connect(self.go_today)

        next_button = QPushButton(">")
        next_button.setProperty("variant", "ghost")
        next_button.clicked.connect(lambda: self.step_period(1))

        self.period_label = QLabel("")
        self.period_label.setProperty("class", "panel-title")

        self.view_combo = QComboBox()
        for label, mode in VIEW_MODES:
            self.view_combo.addItem(label, mode)
        self.view_combo.currentIndexChanged.connect(self.on_view_change)

        self.dark_mode_check = QCheckBox("Темна тема")

        export_ics_button = QPushButton("Експорт ICS")
        export_ics_button.setProperty("variant", "ghost")
        export_ics_button.clicked.connect(self.export_ics)

        toolbar.addWidget(add_button)
        toolbar.addWidget(prev_button)
        toolbar.addWidget(today_button)
        toolbar.addWidget(next_button)
        toolbar.addWidget(self.period_label)
        toolbar.addStretch()
        toolbar.addWidget(self.view_combo)
        toolbar.addWidget(self.dark_mode_check)
        toolbar.addWidget(export_ics_button)

        self.calendar = CalendarGridWidget(week_start=week_start)
        self.calendar.occurrence_moved.connect(self.on_occurrence_moved)
        self.calendar.occurrence_clicked.connect(self.on_occurrence_clicked)
        self.calendar.occurrence_menu.connect(self.on_occurrence_menu)
        self.calendar.date_clicked.connect(self.on_date_clicked)

        layout.addLayout(toolbar)
        layout.addWidget(self.calendar, 1)
        return frame

    def refresh(self) -> None:
        tasks = self.service.list_tasks(self.filters)
        self.task_list.set_tasks(tasks)
        self.tasks_title.setText(f"Мої задачі ({len(tasks)})")

        self.calendar.set_occurrences(self.service.list_occurrences(self.filters))
        self.period_label.setText(self.calendar.period_label())

    def on_filter_change(self) -> None:
        self.filters = TaskFilters(
            status=StatusFilter(self.status_combo.currentData()),
            priority=self.priority_filter.currentData(),
        )
        self.refresh()

    def on_view_change(self) -> None:
        self.calendar.set_view_mode(self.view_combo.currentData())
        self.refresh()

    def step_period(self, direction: int) -> None:
        self.calendar.step(direction)
        self.refresh()

    def go_today(self) -> None:
        self.calendar.go_today()
        self.refresh()

    def on_dark_mode_toggled(self, checked: bool) -> None:
        if checked != self.service.state.dark_mode:
            self.service.toggle_dark_mode()
        apply_theme(QApplication.instance(), self.service.state.dark_mode)

    def new_task(self, draft: dict | None = None) -> None:
        self._open_form(TaskFormDialog(draft=draft, parent=self))

    def edit_task(self, task: TaskEntity) -> None:
        self._open_form(TaskFormDialog(task=task, parent=self))

    def _open_form(self, dialog: TaskFormDialog) -> None:
        while dialog.exec():
            try:
                if dialog.task is None:
                    self.service.create_task(dialog.task_data())
                else:
                    self.service.update_task(dialog.task.id, dialog.task_data())
            except TaskValidationError as exc:
                dialog.show_errors(exc.errors)
                continue
            break
        self.refresh()

    def on_task_double_clicked(self, item: QListWidgetItem) -> None:
        task = self.service.get_task(item.data(Qt.UserRole))
        if task:
            self.edit_task(task)

    def _selected_task_id(self) -> str | None:
        item = self.task_list.currentItem()
        return item.data(Qt.UserRole) if item else None

    def toggle_selected(self) -> None:
        task_id = self._selected_task_id()
        if task_id is None:
            return
        self.service.toggle_task(task_id)
        self.refresh()

    def delete_selected(self) -> None:
        task_id = self._selected_task_id()
        if task_id is None:
            return
        confirm = QMessageBox.question(
            self,
            "Підтвердження",
            "Точно видалити задачу?",
        )
        if confirm != QMessageBox.Yes:
            return
        try:
            self.service.delete_task(task_id)
        except TaskNotFoundError:
            logger.warning("Task %s vanished before delete", task_id)
        self.refresh()

    def on_date_clicked(self, day: date) -> None:
        self.new_task(self.service.on_date_clicked(day))

    def on_occurrence_clicked(self, occurrence: OccurrenceEntity) -> None:
        self.edit_task(self.service.on_event_clicked(occurrence))

    def on_occurrence_moved(self, occurrence: OccurrenceEntity, target: date) -> None:
        shift = target - occurrence.start.date()
        self._apply_interaction(
            lambda: self.service.on_event_moved(
                occurrence,
                occurrence.start + shift,
                occurrence.end + shift,
                occurrence.all_day,
            )
        )

    def on_occurrence_menu(self, occurrence: OccurrenceEntity, global_pos) -> None:
        menu = QMenu(self)
        edit_action = menu.addAction("Редагувати")
        reschedule_action = menu.addAction("Перенести / змінити тривалість")
        new_here_action = menu.addAction("Нова задача на цей час")
        chosen = menu.exec(global_pos)
        if chosen is edit_action:
            self.on_occurrence_clicked(occurrence)
        elif chosen is reschedule_action:
            self.reschedule(occurrence)
        elif chosen is new_here_action:
            value = occurrence.start if not occurrence.all_day else datetime.combine(occurrence.start.date(), time.min)
            self.new_task(self.service.on_date_clicked(value))

    def reschedule(self, occurrence: OccurrenceEntity) -> None:
        dialog = RescheduleDialog(occurrence, self)
        if not dialog.exec():
            return
        if dialog.is_resize:
            self._apply_interaction(
                lambda: self.service.on_event_resized(occurrence, dialog.new_end(), dialog.all_day)
            )
        else:
            self._apply_interaction(
                lambda: self.service.on_event_moved(
                    occurrence, dialog.new_start(), dialog.new_end(), dialog.all_day
                )
            )

    def _apply_interaction(self, action) -> None:
        try:
            action()
        except TaskValidationError as exc:
            QMessageBox.warning(self, "Некоректні дати", "\n".join(exc.errors.values()))
        self.refresh()

    def export_ics(self) -> None:
        path, _ = QFileDialog.getSaveFileName(
            self,
            "Експорт ICS",
            str(Path.home() / "tasks.ics"),
            "ICS Files (*.ics)",
        )
        if not path:
            return
        Path(path).write_text(self.service.export_ics(), encoding="utf-8")
        QMessageBox.information(self, "Готово", "ICS файл збережено.")
