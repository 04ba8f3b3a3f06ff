"""
Configuration for the marsh.io codecs.

Defines MarshSettings, a frozen dataclass carrying runtime policy for traversals
started through marsh.io (from_tree, from_json, to_json). Defaults are sourced from
marsh.core.constants (the single source of truth).

Precedence
- environment (MARSH_*) > TOML (marsh.toml or [tool.marsh] in pyproject.toml) > defaults

Import DAG discipline
- Depends only on stdlib and marsh.core.constants.

Notes
- Invalid values are ignored and the current value is kept.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Literal

import tomllib

from marsh.core.constants import ENSURE_ASCII as CORE_ENSURE_ASCII
from marsh.core.constants import JSON_INDENT as CORE_JSON_INDENT
from marsh.core.constants import TEXT_OVERFLOW as CORE_TEXT_OVERFLOW
from marsh.core.constants import TEXT_OVERFLOW_POLICIES
from marsh.core.constants import UNKNOWN_FIELD_POLICIES
from marsh.core.constants import UNKNOWN_FIELDS as CORE_UNKNOWN_FIELDS

UnknownFields = Literal["ignore", "log"]
TextOverflow = Literal["error", "truncate"]


@dataclass(frozen=True)
class MarshSettings:
    """
    Runtime settings for marsh.io traversals.

    Attributes:
        unknown_fields (Literal["ignore","log"]): Policy for incoming fields the target
            type does not declare. Both drain the value; "log" also logs a warning.
        text_overflow (Literal["error","truncate"]): Policy for text longer than a
            fixed-capacity field when consuming.
        json_indent (int | None): Indentation for to_json; None renders compactly.
        ensure_ascii (bool): Escape non-ASCII characters in to_json output.

    Examples:
        >>> MarshSettings(unknown_fields="log")  # doctest: +ELLIPSIS
        MarshSettings(...)
    """

    unknown_fields: UnknownFields = CORE_UNKNOWN_FIELDS  # type: ignore[assignment]
    text_overflow: TextOverflow = CORE_TEXT_OVERFLOW  # type: ignore[assignment]
    json_indent: int | None = CORE_JSON_INDENT
    ensure_ascii: bool = CORE_ENSURE_ASCII

    @classmethod
    def _apply_mapping(cls, base: MarshSettings, cfg: dict[str, Any] | None) -> MarshSettings:
        """Apply a loose config mapping onto MarshSettings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base

        s = base

        def _bool(v: Any) -> bool:
            if isinstance(v, bool):
                return v
            if isinstance(v, (int, float)):
                return bool(v)
            if isinstance(v, str):
                return v.strip().lower() in {"1", "true", "t", "yes", "y", "on"}
            return False

        def _choice(v: Any, allowed: frozenset[str]) -> str | None:
            if isinstance(v, str):
                lo = v.strip().lower()
                if lo in allowed:
                    return lo
            return None

        if "unknown_fields" in cfg:
            policy = _choice(cfg["unknown_fields"], UNKNOWN_FIELD_POLICIES)
            if policy is not None:
                s = replace(s, unknown_fields=policy)  # type: ignore[arg-type]

        if "text_overflow" in cfg:
            policy = _choice(cfg["text_overflow"], TEXT_OVERFLOW_POLICIES)
            if policy is not None:
                s = replace(s, text_overflow=policy)  # type: ignore[arg-type]

        # json_indent: "none"/"" disables indentation
        if "json_indent" in cfg:
            v = cfg["json_indent"]
            if v is None or (isinstance(v, str) and v.strip().lower() in {"", "none"}):
                s = replace(s, json_indent=None)
            else:
                try:
                    indent = int(v)
                except (TypeError, ValueError):
                    indent = -1
                if indent >= 0:
                    s = replace(s, json_indent=indent)

        if "ensure_ascii" in cfg:
            s = replace(s, ensure_ascii=_bool(cfg["ensure_ascii"]))

        return s

    @classmethod
    def from_env(cls, base: MarshSettings | None = None, prefix: str = "MARSH_") -> MarshSettings:
        """
        Build MarshSettings from environment variables. Precedence is env > base > defaults.

        Recognized variables:
            - MARSH_UNKNOWN_FIELDS ("ignore" | "log")
            - MARSH_TEXT_OVERFLOW ("error" | "truncate")
            - MARSH_JSON_INDENT (int, or "none")
            - MARSH_ENSURE_ASCII (1/0/true/false/yes/no/on/off)
        """
        s = base or cls()
        mapping: dict[str, Any] = {}
        for key in ("unknown_fields", "text_overflow", "json_indent", "ensure_ascii"):
            v = os.getenv(prefix + key.upper())
            if v:
                mapping[key] = v
        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> MarshSettings:
        """
        Build MarshSettings from a TOML file.

        Search order when `path` is None:
            1) ./marsh.toml (with either a [marsh] table or top-level keys)
            2) ./pyproject.toml under [tool.marsh]

        Returns defaults if no file is present.
        """
        s = cls()

        def _load_toml(p: Path) -> dict[str, Any] | None:
            try:
                with p.open("rb") as fh:
                    return tomllib.load(fh)
            except (OSError, tomllib.TOMLDecodeError):
                return None

        cand: list[Path] = []
        if path is not None:
            cand.append(Path(path))
        else:
            cand.append(Path.cwd() / "marsh.toml")
            cand.append(Path.cwd() / "pyproject.toml")

        cfg: dict[str, Any] | None = None
        for p in cand:
            if not p.exists():
                continue
            data = _load_toml(p)
            if not isinstance(data, dict):
                continue
            if p.name == "pyproject.toml":
                tool = data.get("tool", {})
                cfg = tool.get("marsh") if isinstance(tool, dict) else None
            elif isinstance(data.get("marsh"), dict):
                cfg = data["marsh"]
            else:
                cfg = data
            if cfg:
                break

        return cls._apply_mapping(s, cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> MarshSettings:
        """
        Load MarshSettings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search marsh.toml then pyproject.toml.
        """
        s = cls.from_toml(path)
        s = cls.from_env(base=s)
        return s
