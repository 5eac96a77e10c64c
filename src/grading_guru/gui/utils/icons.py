"""Material Design icons via QtAwesome."""
import qtawesome as qta

from grading_guru.gui.styles.theme import get_colors


class MaterialIcons:
    """Centralized Material Design icon definitions using QtAwesome."""

    @staticmethod
    def capture(color=None):
        """Screen region capture."""
        return qta.icon('mdi6.crop-free', color=color or get_colors().TEXT_ON_PRIMARY)

    @staticmethod
    def grade(color=None):
        """Send for grading."""
        return qta.icon('mdi6.check-decagram-outline', color=color or get_colors().TEXT_ON_PRIMARY)

    @staticmethod
    def plus(color=None):
        """Add/plus icon."""
        return qta.icon('mdi6.plus', color=color or get_colors().TEXT_SECONDARY)

    @staticmethod
    def delete():
        """Clear/delete icon."""
        return qta.icon('mdi6.delete-outline', color=get_colors().ERROR)

    @staticmethod
    def content_copy():
        return qta.icon('mdi6.content-copy', color=get_colors().TEXT_SECONDARY)

    @staticmethod
    def content_save(color=None):
        return qta.icon('mdi6.content-save-outline', color=color or get_colors().TEXT_SECONDARY)

    @staticmethod
    def file_import():
        return qta.icon('mdi6.file-import-outline', color=get_colors().TEXT_SECONDARY)

    @staticmethod
    def file_export():
        return qta.icon('mdi6.file-export-outline', color=get_colors().TEXT_SECONDARY)

    @staticmethod
    def zoom_in():
        return qta.icon('mdi6.magnify-plus-outline', color=get_colors().TEXT_SECONDARY)

    @staticmethod
    def zoom_out():
        return qta.icon('mdi6.magnify-minus-outline', color=get_colors().TEXT_SECONDARY)

    @staticmethod
    def settings(color=None):
        """Settings gear icon."""
        return qta.icon('mdi6.cog-outline', color=color or get_colors().TEXT_SECONDARY)
