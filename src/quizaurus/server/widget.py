"""HTML resource that hosts the quiz widget inside the chat client."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from importlib import resources
from pathlib import Path

from jinja2 import Environment, PackageLoader, StrictUndefined

from ..config import WidgetConfig

__all__ = [
    "WIDGET_MIME_TYPE",
    "WidgetAssetError",
    "WidgetAssets",
    "escape_inline_script",
    "load_widget_assets",
    "render_widget_html",
]

logger = logging.getLogger(__name__)

WIDGET_MIME_TYPE = "text/html+skybridge"
ROOT_ELEMENT_ID = "quizaurus-root"
_BUNDLED_SCRIPT = "quiz-runner.js"
_BUNDLED_STYLESHEET = "quiz-runner.css"


class WidgetAssetError(RuntimeError):
    """Raised when the widget script or stylesheet cannot be read."""


@dataclass(frozen=True)
class WidgetAssets:
    script: str
    stylesheet: str
    source: str


def escape_inline_script(code: str) -> str:
    """Keep inlined JavaScript from terminating its ``<script>`` element."""

    return code.replace("</script", "<\\/script")


def load_widget_assets(config: WidgetConfig) -> WidgetAssets:
    """Read the front-end bundle from ``assets_dir`` or the packaged fallback."""

    if config.assets_dir is None:
        bundle = resources.files("quizaurus.server").joinpath("assets")
        return WidgetAssets(
            script=bundle.joinpath(_BUNDLED_SCRIPT).read_text(encoding="utf-8"),
            stylesheet=bundle.joinpath(_BUNDLED_STYLESHEET).read_text(
                encoding="utf-8"
            ),
            source="bundled",
        )
    return WidgetAssets(
        script=_read_asset(config.assets_dir / config.script),
        stylesheet=_read_asset(config.assets_dir / config.stylesheet),
        source=str(config.assets_dir),
    )


def render_widget_html(config: WidgetConfig) -> str:
    assets = load_widget_assets(config)
    logger.debug("Rendering widget from %s assets", assets.source)
    template = _environment().get_template("widget.html.j2")
    return template.render(
        root_id=ROOT_ELEMENT_ID,
        stylesheet=assets.stylesheet,
        script=escape_inline_script(assets.script),
    )


def _read_asset(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise WidgetAssetError(f"Widget asset not readable: {path}") from exc


def _environment() -> Environment:
    # Assets are trusted build output inlined verbatim.
    return Environment(
        loader=PackageLoader("quizaurus.server", "templates"),
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=False,
    )
