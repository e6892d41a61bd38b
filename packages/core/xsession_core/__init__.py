"""Core services for settings, logging, diagnostics, and configured sessions."""

from .config import SessionConfig, load_config, save_config
from .diagnostics import DiagnosticsExporter, build_doctor_payload
from .logging_setup import configure_logging, get_logger
from .session import build_authority, open_session

__all__ = [
    "DiagnosticsExporter",
    "SessionConfig",
    "build_authority",
    "build_doctor_payload",
    "configure_logging",
    "get_logger",
    "load_config",
    "open_session",
    "save_config",
]
