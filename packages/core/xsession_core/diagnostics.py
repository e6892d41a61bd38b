"""Diagnostics payloads and support bundles for connection troubleshooting."""

from __future__ import annotations

import json
import os
import platform
import re
import shutil
import tempfile
import zipfile
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import psutil

from xsession_display import DisplaySpecError, resolve_display, select_target
from xsession_display.transport import X_UNIX_DIR

from .config import SessionConfig, config_path
from .logging_setup import log_dir


_SECRET_RE = re.compile(r"(token|secret|password|cookie|authority_file|auth_data)", re.IGNORECASE)


def redact(value: Any) -> Any:
    if isinstance(value, dict):
        out: dict[str, Any] = {}
        for k, v in value.items():
            if _SECRET_RE.search(k) and v:
                out[k] = "***REDACTED***"
            else:
                out[k] = redact(v)
        return out
    if isinstance(value, list):
        return [redact(v) for v in value]
    return value


def _process_info() -> dict[str, Any]:
    proc = psutil.Process()
    info: dict[str, Any] = {"pid": proc.pid}
    try:
        info["open_fds"] = proc.num_fds()
    except (AttributeError, psutil.Error):
        info["open_fds"] = None
    return info


def _x_listeners() -> list[str]:
    try:
        conns = psutil.net_connections(kind="unix")
    except (psutil.Error, OSError):
        return []
    return sorted({c.laddr for c in conns if isinstance(c.laddr, str) and c.laddr.startswith(X_UNIX_DIR)})


def _display_info(cfg: SessionConfig, env: Mapping[str, str]) -> dict[str, Any]:
    raw = cfg.display.default or env.get("DISPLAY", "")
    info: dict[str, Any] = {"raw": raw}
    try:
        spec = resolve_display(raw, env=env)
    except DisplaySpecError as exc:
        info["error"] = str(exc)
        return info

    target = select_target(spec)
    info["spec"] = asdict(spec)
    info["target"] = target.describe()
    if target.network == "unix" and isinstance(target.address, str):
        info["socket_exists"] = os.path.exists(target.address)
    return info


def build_doctor_payload(cfg: SessionConfig, env: Mapping[str, str] | None = None) -> dict[str, Any]:
    env = os.environ if env is None else env
    return {
        "ts_utc": datetime.now(timezone.utc).isoformat(),
        "platform": platform.platform(),
        "python": platform.python_version(),
        "config": redact(asdict(cfg)),
        "display": _display_info(cfg, env),
        "xauth": {
            "command": cfg.auth.xauth_command,
            "found": shutil.which(cfg.auth.xauth_command) is not None,
            "xauthority_env_set": bool(env.get("XAUTHORITY")),
        },
        "x_listeners": _x_listeners(),
        "process": _process_info(),
    }


class DiagnosticsExporter:
    def __init__(self, app_name: str = "xsession") -> None:
        self.app_name = app_name

    def bundle(
        self,
        cfg: SessionConfig,
        doctor_payload: dict[str, Any],
        output_dir: Path | None = None,
    ) -> Path:
        output_base = output_dir or Path(tempfile.gettempdir())
        output_base.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        zip_path = output_base / f"{self.app_name}-diagnostics-{stamp}.zip"

        logs = sorted(log_dir().glob("*.log*"))

        with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            manifest = {
                "app": self.app_name,
                "created_utc": datetime.now(timezone.utc).isoformat(),
                "host": platform.platform(),
                "python": platform.python_version(),
                "config_path": str(config_path()),
                "log_dir": str(log_dir()),
            }
            zf.writestr("manifest.json", json.dumps(manifest, indent=2, sort_keys=True))
            zf.writestr("doctor.json", json.dumps(redact(doctor_payload), indent=2, sort_keys=True, default=str))
            zf.writestr("config.redacted.json", json.dumps(redact(asdict(cfg)), indent=2, sort_keys=True))

            for item in logs:
                zf.write(item, arcname=f"logs/{item.name}")

        return zip_path
