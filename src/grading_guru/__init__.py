"""Top-level package for Grading Guru.

Provides subpackages:
- grading_guru.core – exam and grading-result models, exam library storage
- grading_guru.capture – screen-region capture
- grading_guru.grading – AI grading request/response contract
- grading_guru.gui – PySide6 desktop app
"""


def _get_version() -> str:
    """Get version from pyproject.toml (dev checkout) or importlib.metadata (installed)."""
    import sys
    from pathlib import Path

    if getattr(sys, "frozen", False):
        pyproject = Path(getattr(sys, "_MEIPASS", ".")) / "pyproject.toml"
    else:
        pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"

    if pyproject.exists():
        for line in pyproject.read_text(encoding="utf-8").splitlines():
            if line.strip().startswith("version"):
                return line.split("=", 1)[1].strip().strip('"').strip("'")

    from importlib.metadata import PackageNotFoundError, version as pkg_version
    try:
        return pkg_version("grading-guru")
    except PackageNotFoundError:
        return "0.0.0"


__version__ = _get_version()
__all__: list[str] = ["__version__"]
