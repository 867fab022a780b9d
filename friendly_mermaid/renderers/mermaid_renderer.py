"""Mermaid renderer using dockerized mermaid-cli."""
from __future__ import annotations

import json
import logging
import subprocess
import tempfile
from pathlib import Path
from typing import Optional

from friendly_mermaid.errors import RenderRejectedError
from friendly_mermaid.renderers import fake_renderers
from friendly_mermaid.renderers.docker_client import run_docker_renderer
from friendly_mermaid.utils.config import Settings, settings as default_settings
from friendly_mermaid.utils.file_utils import read_text_file

logger = logging.getLogger(__name__)


def build_mermaid_config(direction: Optional[str] = None, settings: Optional[Settings] = None) -> dict:
    cfg = settings or default_settings
    return {
        "theme": cfg.theme,
        "layout": cfg.layout,
        "securityLevel": "loose",
        "er": {"useMaxWidth": False, "layoutDirection": direction or "TB"},
        "flowchart": {"useMaxWidth": False, "htmlLabels": True},
    }


def _engine_message(exc: subprocess.CalledProcessError) -> str:
    output = (exc.stderr or exc.stdout or "").strip()
    if len(output) > 2000:
        output = output[:2000] + "..."
    return output or f"mermaid-cli exited with status {exc.returncode}"


def _render_with_docker(mermaid_text: str, direction: Optional[str], cfg: Settings) -> str:
    with tempfile.TemporaryDirectory() as tmp_dir:
        workdir = Path(tmp_dir)
        input_path = workdir / "input.mmd"
        config_path = workdir / "config.json"
        output_path = workdir / "output.svg"
        input_path.write_text(mermaid_text, encoding="utf-8")
        config_path.write_text(json.dumps(build_mermaid_config(direction, cfg)), encoding="utf-8")
        try:
            run_docker_renderer(
                cfg.mermaid_renderer_image,
                workdir,
                ["-i", "input.mmd", "-o", "output.svg", "-c", "config.json"],
                timeout=cfg.render_timeout,
            )
        except subprocess.CalledProcessError as exc:
            raise RenderRejectedError(_engine_message(exc)) from exc
        except subprocess.TimeoutExpired as exc:
            raise RenderRejectedError(f"mermaid-cli timed out after {cfg.render_timeout}s") from exc
        if not output_path.exists():
            raise RenderRejectedError("mermaid-cli produced no output")
        return read_text_file(str(output_path))


def render_mermaid_svg(
    mermaid_text: str,
    direction: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> str:
    """Render compiled Mermaid text to SVG.

    Engine rejections raise ``RenderRejectedError``. A missing Docker binary
    falls back to the offline preview renderer when allowed.
    """
    cfg = settings or default_settings
    if cfg.mermaid_renderer == "preview":
        return fake_renderers.render_mermaid(mermaid_text)
    try:
        return _render_with_docker(mermaid_text, direction, cfg)
    except FileNotFoundError:
        if not cfg.allow_preview_fallback:
            raise
        logger.warning("Docker is not available; falling back to the preview renderer")
        return fake_renderers.render_mermaid(mermaid_text)
