"""Unit tests for theme palettes and score coloring."""

import pytest

from grading_guru.gui.styles import theme
from grading_guru.gui.styles.theme import Colors, ColorsDark, apply_theme, build_stylesheet, score_color


@pytest.fixture(autouse=True)
def light_mode():
    theme.set_dark_mode(False)
    yield
    theme.set_dark_mode(False)


class TestScoreColor:

    @pytest.mark.parametrize(
        "score, possible, expected",
        [
            (8, 10, Colors.SUCCESS),
            (10, 10, Colors.SUCCESS),
            (5, 10, Colors.WARNING),
            (7.9, 10, Colors.WARNING),
            (4.9, 10, Colors.ERROR),
            (0, 10, Colors.ERROR),
            (0, 0, Colors.TEXT_SECONDARY),
        ],
    )
    def test_score_color_thresholds(self, score, possible, expected):
        assert score_color(score, possible) == expected


class TestStylesheet:

    def test_build_stylesheet_styles_named_labels(self):
        sheet = build_stylesheet(Colors)
        for name in ("#sectionTitle", "#scoreLabel", "#errorLabel", "#primaryButton"):
            assert name in sheet

    def test_apply_theme_switches_palette(self, qapp):
        apply_theme(qapp, True)
        assert theme.is_dark_mode()
        assert theme.get_colors() is ColorsDark
        assert ColorsDark.BACKGROUND in qapp.styleSheet()
