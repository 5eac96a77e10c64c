"""
Settings persistence model for the GUI.

This module handles all persistent GUI state: window layout, theme, the exam
library and the AI provider blob. Any malformed data results in a graceful
fallback to defaults, never a crash.
"""
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from PySide6.QtCore import QObject, Signal

from grading_guru.core.models.exams import Exam
from grading_guru.grading.config import AI_SETTINGS_KEY, AISettings

logger = logging.getLogger(__name__)


class SettingsStore(QObject):
    """Lightweight JSON-backed store for persisting GUI preferences and data."""

    aiSettingsChanged = Signal(object)  # AISettings
    examsChanged = Signal(list)  # list[Exam]
    CURRENT_VERSION = 1

    def __init__(self, path: Path) -> None:
        super().__init__()
        self.path = path
        self.data: Dict[str, object] = {}
        self._load_error: Optional[str] = None

        if self.path.exists():
            try:
                self.data = json.loads(self.path.read_text(encoding="utf-8"))
                if isinstance(self.data, dict):
                    self._migrate()
                else:
                    self._load_error = "Settings file is corrupted:\ntop-level value is not an object"
                    self.data = {}
            except json.JSONDecodeError as e:
                self._load_error = f"Settings file is corrupted:\n{e}"
                self.data = {}
            except OSError as e:
                self._load_error = f"Failed to read settings:\n{e}"
                self.data = {}

        if "version" not in self._get_dict():
            self.data["version"] = self.CURRENT_VERSION

    @property
    def load_error(self) -> Optional[str]:
        return self._load_error

    def check_load_error(self) -> bool:
        """
        Check if there was an error loading settings and prompt user to reset.

        Returns True if app should continue, False if app should exit.
        Call this after QApplication is created.
        """
        if not self._load_error:
            return True

        from PySide6.QtWidgets import QMessageBox

        msg = QMessageBox()
        msg.setIcon(QMessageBox.Icon.Warning)
        msg.setWindowTitle("Settings Error")
        msg.setText("Your settings file could not be loaded.")
        msg.setInformativeText(
            f"{self._load_error}\n\n"
            "Would you like to reset settings to defaults and continue? "
            "Saved exams and AI settings will be lost."
        )
        msg.setStandardButtons(QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No)
        msg.setDefaultButton(QMessageBox.StandardButton.Yes)

        if msg.exec() == QMessageBox.StandardButton.Yes:
            self._save()
            self._load_error = None
            return True
        return False

    def _migrate(self) -> None:
        """Stamp the running app version; older files need no conversion yet."""
        from grading_guru import __version__

        if self.data.get("app_version") != __version__:
            self.data["app_version"] = __version__
            self._save()

    # ─────────────────────────────────────────────────────────────────────────
    # Exam library
    # ─────────────────────────────────────────────────────────────────────────

    def get_exams(self) -> List[Exam]:
        """Stored exams; malformed entries are skipped with a warning."""
        raw = self._get_dict().get("exams")
        if not isinstance(raw, list):
            return []
        exams: List[Exam] = []
        for entry in raw:
            if not isinstance(entry, dict):
                continue
            try:
                exams.append(Exam.from_dict(entry))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed exam in settings: {e}")
        return exams

    def set_exams(self, exams: List[Exam]) -> None:
        self._get_dict()["exams"] = [exam.to_dict() for exam in exams]
        self._save()
        self.examsChanged.emit(list(exams))

    def upsert_exam(self, exam: Exam) -> List[Exam]:
        """Replace the exam with the same id, or append it. Returns the new list."""
        exams = self.get_exams()
        for index, existing in enumerate(exams):
            if existing.id == exam.id:
                exams[index] = exam
                break
        else:
            exams.append(exam)
        self.set_exams(exams)
        return exams

    def delete_exam(self, exam_id: str) -> List[Exam]:
        exams = [e for e in self.get_exams() if e.id != exam_id]
        self.set_exams(exams)
        return exams

    def get_selected_exam_id(self) -> Optional[str]:
        val = self._ui().get("selected_exam_id")
        return val if isinstance(val, str) else None

    def set_selected_exam_id(self, exam_id: Optional[str]) -> None:
        self._ui()["selected_exam_id"] = exam_id
        self._save()

    # ─────────────────────────────────────────────────────────────────────────
    # AI settings
    # ─────────────────────────────────────────────────────────────────────────

    def get_ai_settings(self) -> AISettings:
        return AISettings.from_dict(self._get_dict().get(AI_SETTINGS_KEY))

    def set_ai_settings(self, settings: AISettings) -> None:
        self._get_dict()[AI_SETTINGS_KEY] = settings.to_dict()
        self._save()
        self.aiSettingsChanged.emit(settings)

    # ─────────────────────────────────────────────────────────────────────────
    # Window state
    # ─────────────────────────────────────────────────────────────────────────

    def get_window_geometry(self) -> Optional[str]:
        """Saved window geometry as hex, or None if missing or not valid hex."""
        return self._get_hex("window_geometry")

    def set_window_geometry(self, geometry: str) -> None:
        self._get_dict()["window_geometry"] = geometry
        self._save()

    def get_splitter_state(self) -> Optional[str]:
        return self._get_hex("splitter_state")

    def set_splitter_state(self, state: str) -> None:
        self._get_dict()["splitter_state"] = state
        self._save()

    def get_dark_mode(self) -> bool:
        return bool(self._ui().get("dark_mode", False))

    def set_dark_mode(self, enabled: bool) -> None:
        self._ui()["dark_mode"] = enabled
        self._save()

    def get_console_visible(self) -> bool:
        return bool(self._ui().get("console_visible", True))

    def set_console_visible(self, visible: bool) -> None:
        self._ui()["console_visible"] = visible
        self._save()

    # ─────────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────────

    def _get_hex(self, key: str) -> Optional[str]:
        value = self._get_dict().get(key)
        if not isinstance(value, str):
            return None
        try:
            bytes.fromhex(value)
        except ValueError:
            logger.warning(f"Invalid {key} in settings, ignoring")
            return None
        return value

    def _ui(self) -> Dict[str, object]:
        ui = self._get_dict().get("ui")
        if not isinstance(ui, dict):
            ui = {}
            self.data["ui"] = ui
        return ui

    def _get_dict(self) -> Dict[str, object]:
        if not isinstance(self.data, dict):
            self.data = {}
        return self.data

    def _save(self) -> None:
        """Write settings with atomic replacement via a temp file."""
        temp_path = self.path.with_suffix('.tmp')
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(json.dumps(self.data, indent=2), encoding="utf-8")
            temp_path.replace(self.path)
        except OSError as e:
            logger.warning(f"Failed to save settings: {e}")
            try:
                temp_path.unlink(missing_ok=True)
            except OSError:
                pass
