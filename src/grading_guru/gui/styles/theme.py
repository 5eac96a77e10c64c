"""
Theme definitions for the Grading Guru GUI.
"""


class Colors:
    # Primary Colors
    PRIMARY_BLUE = "#0364B8"
    PRIMARY_BLUE_HOVER = "#0A2767"
    PRIMARY_BLUE_PRESSED = "#0A2767"

    # Backgrounds
    BACKGROUND = "#f5f5f5"
    SURFACE = "#ffffff"
    HOVER = "#f0f0f0"
    DISABLED_BG = "#e0e0e0"

    # Text
    TEXT_PRIMARY = "#1f1f1f"
    TEXT_SECONDARY = "#666666"
    TEXT_DISABLED = "#757575"
    TEXT_ON_PRIMARY = "#ffffff"

    # Borders & Dividers
    BORDER = "#e0e0e0"
    DIVIDER = "#eeeeee"
    BORDER_FOCUS = "#28A8EA"

    # Status
    ERROR = "#d32f2f"
    SUCCESS = "#388e3c"
    WARNING = "#f57c00"
    INFO = "#1976d2"

    # Sidebar selection
    SELECTION_BG = "#1490DF"
    SELECTION_TEXT = "#ffffff"

    # Toggles
    TOGGLE_BG = "#f57c00"


class ColorsDark:
    """Dark palette."""

    PRIMARY_BLUE = "#3794FF"
    PRIMARY_BLUE_HOVER = "#4FA3FF"
    PRIMARY_BLUE_PRESSED = "#2A7FE8"

    BACKGROUND = "#1e1e1e"
    SURFACE = "#252526"
    HOVER = "#21262D"
    DISABLED_BG = "#3D444D"

    TEXT_PRIMARY = "#E6EDF3"
    TEXT_SECONDARY = "#8B949E"
    TEXT_DISABLED = "#9CA3AF"
    TEXT_ON_PRIMARY = "#FFFFFF"

    BORDER = "#30363D"
    DIVIDER = "#21262D"
    BORDER_FOCUS = "#3794FF"

    ERROR = "#F85149"
    SUCCESS = "#3FB950"
    WARNING = "#D29922"
    INFO = "#58A6FF"

    SELECTION_BG = "#1F6FEB"
    SELECTION_TEXT = "#FFFFFF"

    TOGGLE_BG = "#D29922"


class Fonts:
    UI_FONT = "-apple-system, 'SF Pro Text', 'Segoe UI', Roboto, Helvetica, Arial, sans-serif"
    MONO_FONT = "Consolas, Monaco, Menlo, 'Courier New', monospace"

    H1 = "18pt"
    H2 = "16pt"
    BODY = "14pt"
    SMALL = "12pt"
    CONSOLE = "13pt"

    WEIGHT_REGULAR = "400"
    WEIGHT_MEDIUM = "500"
    WEIGHT_BOLD = "600"


def build_stylesheet(C) -> str:
    """Global QSS for one palette."""
    return f"""
        QMainWindow, QDialog {{
            background-color: {C.BACKGROUND};
            color: {C.TEXT_PRIMARY};
        }}
        QWidget {{
            font-family: {Fonts.UI_FONT};
        }}
        QLabel {{
            color: {C.TEXT_PRIMARY};
        }}
        QLabel#sectionTitle {{
            font-size: {Fonts.H2};
            font-weight: {Fonts.WEIGHT_BOLD};
        }}
        QLabel#scoreLabel {{
            font-size: {Fonts.H1};
            font-weight: {Fonts.WEIGHT_BOLD};
            color: {C.PRIMARY_BLUE};
        }}
        QLabel#errorLabel {{
            color: {C.ERROR};
        }}
        QLabel#hintLabel {{
            color: {C.TEXT_SECONDARY};
            font-size: {Fonts.SMALL};
        }}
        QPushButton {{
            background-color: {C.SURFACE};
            color: {C.TEXT_PRIMARY};
            border: 1px solid {C.BORDER};
            border-radius: 6px;
            padding: 6px 14px;
            font-weight: {Fonts.WEIGHT_MEDIUM};
        }}
        QPushButton:hover {{
            background-color: {C.HOVER};
        }}
        QPushButton:disabled {{
            background-color: {C.DISABLED_BG};
            color: {C.TEXT_DISABLED};
        }}
        QPushButton#primaryButton {{
            background-color: {C.PRIMARY_BLUE};
            color: {C.TEXT_ON_PRIMARY};
            border: none;
        }}
        QPushButton#primaryButton:hover {{
            background-color: {C.PRIMARY_BLUE_HOVER};
        }}
        QPushButton#primaryButton:disabled {{
            background-color: {C.DISABLED_BG};
            color: {C.TEXT_DISABLED};
        }}
        QLineEdit, QPlainTextEdit, QComboBox, QDoubleSpinBox {{
            background-color: {C.SURFACE};
            color: {C.TEXT_PRIMARY};
            border: 1px solid {C.BORDER};
            border-radius: 4px;
            padding: 4px 6px;
        }}
        QLineEdit:focus, QPlainTextEdit:focus, QComboBox:focus {{
            border: 1px solid {C.BORDER_FOCUS};
        }}
        QListWidget {{
            background-color: {C.SURFACE};
            border: 1px solid {C.BORDER};
            border-radius: 4px;
        }}
        QListWidget::item {{
            padding: 6px;
        }}
        QListWidget::item:selected {{
            background-color: {C.SELECTION_BG};
            color: {C.SELECTION_TEXT};
        }}
        QGroupBox {{
            background-color: {C.SURFACE};
            border: 1px solid {C.BORDER};
            border-radius: 6px;
            margin-top: 20px;
        }}
        QGroupBox::title {{
            subcontrol-origin: margin;
            left: 8px;
            padding: 0 4px;
            color: {C.TEXT_PRIMARY};
        }}
        QSplitter::handle {{
            background-color: {C.DIVIDER};
        }}
    """


_is_dark_mode = False


def set_dark_mode(is_dark: bool):
    """Explicitly set the dark mode state. Called by MainWindow._apply_theme."""
    global _is_dark_mode
    _is_dark_mode = is_dark


def is_dark_mode() -> bool:
    return _is_dark_mode


def get_colors():
    """Get the appropriate color palette based on current theme."""
    return ColorsDark if _is_dark_mode else Colors


def apply_theme(app, is_dark: bool = False) -> None:
    """Switch palette and restyle the whole application."""
    set_dark_mode(is_dark)
    app.setStyleSheet(build_stylesheet(get_colors()))


def score_color(score: float, possible: float) -> str:
    """Status color for a score: green from 80%, orange from 50%, red below."""
    C = get_colors()
    if possible <= 0:
        return C.TEXT_SECONDARY
    ratio = score / possible
    if ratio >= 0.8:
        return C.SUCCESS
    if ratio >= 0.5:
        return C.WARNING
    return C.ERROR
