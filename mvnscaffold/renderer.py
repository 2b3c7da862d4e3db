"""Jinja2 template rendering for module scaffolding.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``mvnscaffold/templates/`` directory and renders them with generation
properties.  Rendered files are written through a ``FileEditor`` so nothing
reaches the disk until the generation run commits.

Destination paths may contain ``__name__`` tokens which are replaced by the
context value of the same name, e.g. ``src/main/java/__packagePath__/``.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from mvnscaffold.state.editor import FileEditor

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"
_PATH_TOKEN = re.compile(r"__([A-Za-z][A-Za-z0-9]*)__")


class TemplateRenderer:
    """Renders Jinja2 templates for module scaffolding.

    Templates are ``.j2`` files under a configurable template directory,
    grouped by generator (``bundle/pom.xml.j2``, ``bundle/shared/...``).
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["package_path"] = package_path

    # -- Single template rendering -----------------------------------------

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"bundle/pom.xml.j2"``).
            context: Dictionary of variables available inside the template.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)

    # -- Tree rendering ----------------------------------------------------

    def render_tree(
        self,
        template_prefix: str,
        output_dir: str | Path,
        context: dict[str, Any],
        editor: FileEditor,
    ) -> list[Path]:
        """Render every ``*.j2`` file under *template_prefix* into *output_dir*.

        The directory structure is preserved and ``__name__`` path tokens are
        substituted from *context*.  A missing prefix renders nothing.

        Returns:
            List of written file paths.
        """
        written: list[Path] = []
        out_base = Path(output_dir)
        for template_key in self.list_templates(template_prefix):
            rel = Path(template_key).relative_to(template_prefix)
            output_name = fix_path(str(rel)[: -len(".j2")], context)
            content = self.render(template_key, context)
            written.append(editor.write(out_base / output_name, content))
        return written

    def list_templates(self, prefix: str = "") -> list[str]:
        """Return a sorted list of all ``.j2`` template paths under *prefix*.

        Paths are relative to the template root directory and always use
        forward slashes, as Jinja2 expects.
        """
        search_dir = self.template_dir / prefix if prefix else self.template_dir
        if not search_dir.is_dir():
            return []
        return sorted(
            p.relative_to(self.template_dir).as_posix()
            for p in search_dir.rglob("*.j2")
        )


def fix_path(path: str, context: dict[str, Any]) -> str:
    """Replace ``__name__`` tokens in *path* with values from *context*."""

    def _sub(match: re.Match[str]) -> str:
        value = context.get(match.group(1))
        return match.group(0) if value is None else str(value)

    return _PATH_TOKEN.sub(_sub, path)


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------


def package_path(value: str) -> str:
    """Convert a Java package (``com.mysite``) to a path (``com/mysite``)."""
    return value.replace(".", "/")
