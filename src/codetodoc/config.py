# SPDX-License-Identifier: Apache-2.0
"""Export configuration.

Values come from ``ExportConfig`` defaults, optionally overridden through
``CODETODOC_*`` environment variables (a ``.env`` file is honoured).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Union

from dotenv import load_dotenv

from codetodoc.core.models import PaginationMode

ENV_PREFIX = "CODETODOC_"

APP_NAME = "codeToDoc"


@dataclass
class ExportConfig:
    """Export pipeline configuration."""

    # Rasterization
    scale_factor: float = 2.0
    capture_timeout: float = 10.0  # seconds to wait for a markup surface

    # Document metadata
    default_author: str = f"Generated by {APP_NAME}"
    creator: str = APP_NAME
    default_language: str = "javascript"
    default_title: str = "document"
    date_format: str = "%Y-%m-%d"

    # Code preview appearance
    theme: str = "atomDark"
    line_numbers: bool = True
    font_size: int = 14
    code_font_path: Optional[Path] = None

    # PDF layout
    pagination: PaginationMode = PaginationMode.CROP
    header_font_path: Optional[Path] = None  # TrueType for non-Latin titles

    @classmethod
    def from_env(
        cls,
        env_file: Optional[Union[str, Path]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> ExportConfig:
        """Build a config from ``CODETODOC_<FIELD>`` environment variables.

        Args:
            env_file: .env file to load first (default: search upward from cwd).
            environ: Mapping to read instead of ``os.environ`` (skips .env).

        Raises:
            ValueError: If a variable cannot be converted to its field type.
        """
        if environ is None:
            load_dotenv(dotenv_path=env_file)
            environ = os.environ

        overrides: dict[str, Any] = {}
        for f in fields(cls):
            key = ENV_PREFIX + f.name.upper()
            raw = environ.get(key)
            if raw is None or raw == "":
                continue
            parser = _PARSERS[f.name]
            try:
                overrides[f.name] = parser(raw)
            except ValueError as exc:
                raise ValueError(f"Invalid value for {key}: {raw!r}") from exc
        return cls(**overrides)


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"not a boolean: {raw!r}")


def _parse_positive_float(raw: str) -> float:
    value = float(raw)
    if value <= 0:
        raise ValueError("must be positive")
    return value


def _parse_positive_int(raw: str) -> int:
    value = int(raw)
    if value <= 0:
        raise ValueError("must be positive")
    return value


_PARSERS: dict[str, Callable[[str], Any]] = {
    "scale_factor": _parse_positive_float,
    "capture_timeout": _parse_positive_float,
    "default_author": str,
    "creator": str,
    "default_language": str,
    "default_title": str,
    "date_format": str,
    "theme": str,
    "line_numbers": _parse_bool,
    "font_size": _parse_positive_int,
    "code_font_path": Path,
    "pagination": lambda raw: PaginationMode(raw.strip().lower()),
    "header_font_path": Path,
}
