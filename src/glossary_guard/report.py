"""
Rendu texte du bilan de validation (template Jinja2).
"""

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .validator import Summary

TEMPLATE_DIR = Path(__file__).parent / "templates"
REPORT_TEMPLATE = "report.jinja"

STATUS_ICONS = {
    "PASS": "✅",
    "WARN": "⚠️",
    "FAIL": "❌",
    "ERROR": "💥",
}


class ReportRenderer:
    """
    Rend un Summary avec le template `report.jinja`.

    Example:
        >>> renderer = ReportRenderer()
        >>> print(renderer.render(summary))
    """

    def __init__(self, template_dir: Path | str = TEMPLATE_DIR):
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, summary: Summary, written_to: str = "") -> str:
        """
        Args:
            summary: Bilan de la validation
            written_to: Chemin où le fichier corrigé a été écrit ("" si non écrit)
        """
        template = self.env.get_template(REPORT_TEMPLATE)
        return template.render(
            summary=summary,
            icons=STATUS_ICONS,
            written_to=written_to,
        )


def render_report(summary: Summary, written_to: str = "") -> str:
    return ReportRenderer().render(summary, written_to=written_to)
