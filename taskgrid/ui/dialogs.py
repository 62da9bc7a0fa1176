from __future__ import annotations

from datetime import date, datetime, timedelta

from PySide6.QtCore import QDate, QDateTime, QTime
from PySide6.QtWidgets import (
    QAbstractSpinBox,
    QCheckBox,
    QComboBox,
    QDateEdit,
    QDateTimeEdit,
    QDialog,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QSpinBox,
    QTextEdit,
    QTimeEdit,
    QVBoxLayout,
)

from taskgrid.domain.colors import TASK_COLORS
from taskgrid.domain.entities import OccurrenceEntity, TaskEntity
from taskgrid.domain.enums import RecurrenceType
from taskgrid.domain.timing import parse_time

from .widgets import PRIORITY_OPTIONS

RECURRENCE_OPTIONS = [
    ("Без повтору", RecurrenceType.NONE.value),
    ("Щодня", RecurrenceType.DAILY.value),
    ("Щотижня", RecurrenceType.WEEKLY.value),
    ("Щомісяця", RecurrenceType.MONTHLY.value),
]


def _to_qdate(value: date) -> QDate:
    return QDate(value.year, value.month, value.day)


def _to_qdatetime(value: datetime) -> QDateTime:
    return QDateTime(_to_qdate(value.date()), QTime(value.hour, value.minute))


class _OptionalDate:
    def __init__(self, label: str) -> None:
        self.check = QCheckBox(label)
        self.edit = QDateEdit()
        self.edit.setCalendarPopup(True)
        self.edit.setDisplayFormat("dd.MM.yyyy")
        self.edit.setDate(QDate.currentDate())
        self.edit.setEnabled(False)
        self.check.toggled.connect(self.edit.setEnabled)

    def set_value(self, value: date | None) -> None:
        self.check.setChecked(value is not None)
        if value is not None:
            self.edit.setDate(_to_qdate(value))

    def value(self) -> date | None:
        return self.edit.date().toPython() if self.check.isChecked() else None


class _OptionalTime:
    def __init__(self, label: str) -> None:
        self.check = QCheckBox(label)
        self.edit = QTimeEdit()
        self.edit.setDisplayFormat("HH:mm")
        self.edit.setTime(QTime(9, 0))
        self.edit.setEnabled(False)
        self.check.toggled.connect(self.edit.setEnabled)

    def set_value(self, value: str | None) -> None:
        self.check.setChecked(bool(value))
        if value:
            parsed = parse_time(value)
            self.edit.setTime(QTime(parsed.hour, parsed.minute))

    def value(self) -> str | None:
        return self.edit.time().toString("HH:mm") if self.check.isChecked() else None


class TaskFormDialog(QDialog):
    def __init__(self, task: TaskEntity | None = None, draft: dict | None = None, parent=None):
        super().__init__(parent)
        self.task = task
        self.setWindowTitle("Редагувати задачу" if task else "Нова задача")
        self.setMinimumWidth(420)

        self.title_input = QLineEdit()
        self.title_input.setPlaceholderText("Напр.: Зустріч команди")

        self.description_input = QTextEdit()
        self.description_input.setPlaceholderText("Деталі задачі")
        self.description_input.setMaximumHeight(100)

        self.start_date = _OptionalDate("Дата початку")
        self.start_time = _OptionalTime("Час початку")
        self.end_date = _OptionalDate("Дата завершення")
        self.end_time = _OptionalTime("Час завершення")

        self.priority_combo = QComboBox()
        for label, value in PRIORITY_OPTIONS:
            self.priority_combo.addItem(label, value)

        self.color_combo = QComboBox()
        self.color_combo.addItem("За пріоритетом", None)
        for color in TASK_COLORS:
            self.color_combo.addItem(color.name, color.id)

        self.recurrence_combo = QComboBox()
        for label, value in RECURRENCE_OPTIONS:
            self.recurrence_combo.addItem(label, value)

        self.recurrence_interval = QSpinBox()
        self.recurrence_interval.setRange(1, 365)
        self.recurrence_interval.setValue(1)
        self.recurrence_interval.setSuffix("x")
        self.recurrence_interval.setButtonSymbols(QAbstractSpinBox.UpDownArrows)

        self.recurrence_end = _OptionalDate("Кінець повтору")

        self.error_label = QLabel("")
        self.error_label.setProperty("class", "form-error")
        self.error_label.setStyleSheet("color: #ef4444;")
        self.error_label.setWordWrap(True)
        self.error_label.setVisible(False)

        form = QFormLayout()
        form.addRow("Назва *", self.title_input)
        form.addRow("Опис", self.description_input)
        for field in (self.start_date, self.start_time, self.end_date, self.end_time):
            form.addRow(field.check, field.edit)
        form.addRow("Пріоритет", self.priority_combo)
        form.addRow("Колір", self.color_combo)
        form.addRow("Повторення", self.recurrence_combo)
        form.addRow("Інтервал", self.recurrence_interval)
        form.addRow(self.recurrence_end.check, self.recurrence_end.edit)

        cancel_button = QPushButton("Скасувати")
        cancel_button.setProperty("variant", "secondary")
        cancel_button.clicked.connect(self.reject)

        save_button = QPushButton("Зберегти" if task else "Додати")
        save_button.clicked.connect(self._submit)

        buttons = QHBoxLayout()
        buttons.addStretch()
        buttons.addWidget(cancel_button)
        buttons.addWidget(save_button)

        layout = QVBoxLayout(self)
        layout.addLayout(form)
        layout.addWidget(self.error_label)
        layout.addLayout(buttons)

        if task:
            self._populate(task)
        elif draft:
            self.start_date.set_value(draft.get("start_date"))
            self.start_time.set_value(draft.get("start_time"))
        self.priority_combo.setCurrentIndex(
            self.priority_combo.findData(task.priority.value if task else "medium")
        )

    def _populate(self, task: TaskEntity) -> None:
        self.title_input.setText(task.title)
        self.description_input.setPlainText(task.description)
        self.start_date.set_value(task.start_date)
        self.start_time.set_value(task.start_time)
        self.end_date.set_value(task.end_date)
        self.end_time.set_value(task.end_time)

        color_index = self.color_combo.findData(task.color)
        self.color_combo.setCurrentIndex(max(color_index, 0))

        recurrence_index = self.recurrence_combo.findData(task.recurrence_type.value)
        if recurrence_index >= 0:
            self.recurrence_combo.setCurrentIndex(recurrence_index)
        self.recurrence_interval.setValue(task.recurrence_interval or 1)
        self.recurrence_end.set_value(task.recurrence_end_date)

    def task_data(self) -> dict:
        return {
            "title": self.title_input.text().strip(),
            "description": self.description_input.toPlainText().strip(),
            "start_date": self.start_date.value(),
            "start_time": self.start_time.value(),
            "end_date": self.end_date.value(),
            "end_time": self.end_time.value(),
            "priority": self.priority_combo.currentData(),
            "color": self.color_combo.currentData(),
            "recurrence_type": self.recurrence_combo.currentData(),
            "recurrence_interval": self.recurrence_interval.value(),
            "recurrence_end_date": self.recurrence_end.value(),
        }

    def show_errors(self, errors: dict[str, str]) -> None:
        self.error_label.setText("\n".join(errors.values()))
        self.error_label.setVisible(True)

    def _submit(self) -> None:
        if not self.title_input.text().strip():
            self.show_errors({"title": "Вкажи назву задачі."})
            return
        self.accept()


class RescheduleDialog(QDialog):
    """Explicit move/resize of one occurrence, for precise times."""

    def __init__(self, occurrence: OccurrenceEntity, parent=None):
        super().__init__(parent)
        self.occurrence = occurrence
        self.setWindowTitle("Перенести")

        title = QLabel(occurrence.title)
        title.setStyleSheet("font-size: 14px; font-weight: 600;")

        self.all_day_check = QCheckBox("Весь день")
        self.all_day_check.setChecked(occurrence.all_day)

        self.start_edit = QDateTimeEdit(_to_qdatetime(occurrence.start))
        self.start_edit.setCalendarPopup(True)
        self.start_edit.setDisplayFormat("dd.MM.yyyy HH:mm")

        self.end_edit = QDateTimeEdit(_to_qdatetime(occurrence.end))
        self.end_edit.setCalendarPopup(True)
        self.end_edit.setDisplayFormat("dd.MM.yyyy HH:mm")

        self.resize_only = QCheckBox("Лише змінити тривалість")

        if occurrence.is_recurrence:
            hint = QLabel("Зміни застосуються до всієї серії повторів.")
            hint.setWordWrap(True)
        else:
            hint = QLabel("")

        form = QFormLayout()
        form.addRow(self.all_day_check)
        form.addRow("Початок", self.start_edit)
        form.addRow("Кінець", self.end_edit)
        form.addRow(self.resize_only)

        self.resize_only.toggled.connect(lambda checked: self.start_edit.setEnabled(not checked))

        cancel_button = QPushButton("Скасувати")
        cancel_button.setProperty("variant", "secondary")
        cancel_button.clicked.connect(self.reject)

        apply_button = QPushButton("Застосувати")
        apply_button.clicked.connect(self.accept)

        buttons = QHBoxLayout()
        buttons.addStretch()
        buttons.addWidget(cancel_button)
        buttons.addWidget(apply_button)

        layout = QVBoxLayout(self)
        layout.addWidget(title)
        layout.addWidget(hint)
        layout.addLayout(form)
        layout.addLayout(buttons)

    @property
    def all_day(self) -> bool:
        return self.all_day_check.isChecked()

    @property
    def is_resize(self) -> bool:
        return self.resize_only.isChecked()

    def new_start(self) -> datetime:
        value = self.start_edit.dateTime().toPython()
        if self.all_day:
            return datetime.combine(value.date(), datetime.min.time())
        return value

    def new_end(self) -> datetime:
        value = self.end_edit.dateTime().toPython()
        if self.all_day:
            day = value.date()
            if day <= self.new_start().date():
                day = self.new_start().date() + timedelta(days=1)
            return datetime.combine(day, datetime.min.time())
        return value
