"""Expand a short phrase from the command line through the generation proxy."""
from __future__ import annotations
import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from form_assist.client.controller import ControllerConfig, FormAssistController
from form_assist.common.logging_setup import setup_logging

LOGGER = logging.getLogger("form_assist.client.cli")

def load_cfg(path: str | None) -> dict[str, Any]:
    if not path:
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}

def run(text: str, cfg: dict[str, Any], transport: httpx.AsyncBaseTransport | None = None) -> tuple[int, str]:
    """
    Feed `text` through a controller as if typed and clicked.

    Returns:
        (exit code, text to print). 0 with the generated paragraph, 1 with the
        error banner on failure, 2 when the input would not show the trigger.
    """
    controller = FormAssistController(ControllerConfig.from_dict(cfg), transport=transport)
    controller.on_input(text)
    if controller.view.trigger.hidden:
        bounds = f"{controller.config.min_length}-{controller.config.max_length}"
        return 2, f"Input must be {bounds} characters to generate a description."

    result = asyncio.run(controller.generate())
    if result is None:
        return 1, controller.view.error_banner.message
    return 0, result.generated_text

def main() -> None:
    setup_logging()
    ap = argparse.ArgumentParser(description="Expand a short idea into a workflow description")
    ap.add_argument("--text", required=True, help="Short description (3-50 characters)")
    default_cfg = "configs/client.yaml" if Path("configs/client.yaml").exists() else None
    ap.add_argument("--cfg", default=default_cfg, help="YAML config path")
    ap.add_argument("--endpoint", help="Override the proxy URL from the config")
    args = ap.parse_args()

    cfg = load_cfg(args.cfg)
    if args.endpoint:
        cfg["endpoint"] = args.endpoint

    code, out = run(args.text, cfg)
    if code:
        LOGGER.error(out)
        sys.exit(code)
    print(out)

if __name__ == "__main__":
    main()
