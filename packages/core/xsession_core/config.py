"""Persistent settings schema and load/save helpers."""

from __future__ import annotations

import json
import os
import platform
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any


CONFIG_VERSION = 1


@dataclass
class DisplayConfig:
    default: str = ""


@dataclass
class AuthConfig:
    allow_fallback: bool = True
    xauth_command: str = "xauth"
    authority_file: str | None = None


@dataclass
class ConnectConfig:
    timeout_s: float | None = None


@dataclass
class DiagnosticsConfig:
    keep_log_files: int = 7


@dataclass
class SessionConfig:
    config_version: int = CONFIG_VERSION
    display: DisplayConfig = field(default_factory=DisplayConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    connect: ConnectConfig = field(default_factory=ConnectConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)


def config_root() -> Path:
    system = platform.system()
    if system == "Windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "XSession"
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "XSession"
    return Path.home() / ".config" / "xsession"


def config_path() -> Path:
    return config_root() / "config.json"


def _merge(dataclass_type, raw: dict[str, Any]):
    defaults = dataclass_type()  # type: ignore[misc]
    if not isinstance(raw, dict):
        return defaults
    for k, v in raw.items():
        if hasattr(defaults, k):
            setattr(defaults, k, v)
    return defaults


def _normalize_auth(cfg: SessionConfig) -> None:
    cfg.auth.allow_fallback = bool(cfg.auth.allow_fallback)
    if not cfg.auth.xauth_command:
        cfg.auth.xauth_command = "xauth"
    if not cfg.auth.authority_file:
        cfg.auth.authority_file = None


def _normalize_connect(cfg: SessionConfig) -> None:
    timeout = cfg.connect.timeout_s
    try:
        timeout = float(timeout) if timeout is not None else None
    except (TypeError, ValueError):
        timeout = None
    if timeout is not None and timeout <= 0:
        timeout = None
    cfg.connect.timeout_s = timeout


def _normalize_diagnostics(cfg: SessionConfig) -> None:
    try:
        keep = int(cfg.diagnostics.keep_log_files)
    except (TypeError, ValueError):
        keep = DiagnosticsConfig.keep_log_files
    cfg.diagnostics.keep_log_files = max(2, keep)


def load_config(path: Path | None = None) -> SessionConfig:
    path = path or config_path()
    if not path.exists():
        return SessionConfig()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return SessionConfig()
    if not isinstance(raw, dict):
        return SessionConfig()

    cfg = SessionConfig(
        config_version=int(raw.get("config_version", CONFIG_VERSION)),
        display=_merge(DisplayConfig, raw.get("display", {})),
        auth=_merge(AuthConfig, raw.get("auth", {})),
        connect=_merge(ConnectConfig, raw.get("connect", {})),
        diagnostics=_merge(DiagnosticsConfig, raw.get("diagnostics", {})),
    )

    _normalize_auth(cfg)
    _normalize_connect(cfg)
    _normalize_diagnostics(cfg)
    return cfg


def save_config(cfg: SessionConfig, path: Path | None = None) -> Path:
    cfg.config_version = CONFIG_VERSION
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True), encoding="utf-8")
    return path
