import logging
import logging.handlers
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

from alarms.clock import ClockTime
from alarms.vibration import parse_pattern


def _get_env_bool(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip() in {"1", "true", "True", "yes", "YES", "y"}


def _get_env_int(name: str, default: int) -> int:
    val = os.getenv(name)
    if val is None or val == "":
        return default
    try:
        return int(val)
    except ValueError as exc:
        raise ValueError(f"Environment variable {name} must be an integer") from exc


def _get_env_float(name: str, default: float) -> float:
    val = os.getenv(name)
    if val is None or val == "":
        return default
    try:
        return float(val)
    except ValueError as exc:
        raise ValueError(f"Environment variable {name} must be a float") from exc


@dataclass
class Config:
    alarm_sound_path: Path
    shifts_path: Path
    alert_window_seconds: float
    tick_interval_ms: int
    countdown_display_seconds: int
    vibration_enabled: bool
    vibration_pattern_ms: Tuple[int, ...]
    default_mode: str
    default_manual_time: ClockTime
    default_shift: Optional[str]
    speak_confirmations: bool
    debug: bool
    log_level: str


def load_config(env_path: Optional[Path] = None) -> Config:
    if env_path is None:
        env_path = Path(".env")
    if env_path.exists():
        load_dotenv(env_path)

    alarm_sound_path = Path(os.getenv("ALARM_SOUND_PATH", "data/alarm.wav"))
    shifts_path = Path(os.getenv("SHIFTS_PATH", "data/shifts.json"))
    alert_window_seconds = _get_env_float("ALERT_WINDOW_SECONDS", 30.0)
    if alert_window_seconds <= 0:
        raise ValueError("ALERT_WINDOW_SECONDS must be positive")
    tick_interval_ms = _get_env_int("TICK_INTERVAL_MS", 1000)
    if tick_interval_ms <= 0:
        raise ValueError("TICK_INTERVAL_MS must be positive")
    countdown_display_seconds = _get_env_int("COUNTDOWN_DISPLAY_SECONDS", 60)
    if countdown_display_seconds <= 0:
        raise ValueError("COUNTDOWN_DISPLAY_SECONDS must be positive")
    vibration_enabled = _get_env_bool("VIBRATION_ENABLED", False)
    try:
        vibration_pattern_ms = parse_pattern(os.getenv("VIBRATION_PATTERN_MS", "500,500"))
    except ValueError as exc:
        raise ValueError(f"Environment variable VIBRATION_PATTERN_MS is invalid: {exc}") from exc

    default_mode = os.getenv("DEFAULT_MODE", "manual").strip().lower()
    if default_mode not in ("manual", "shift"):
        raise ValueError("DEFAULT_MODE must be 'manual' or 'shift'")
    try:
        default_manual_time = ClockTime.parse(os.getenv("DEFAULT_MANUAL_TIME", "08:30 AM"))
    except ValueError as exc:
        raise ValueError(f"Environment variable DEFAULT_MANUAL_TIME is invalid: {exc}") from exc
    default_shift = os.getenv("DEFAULT_SHIFT") or None

    speak_confirmations = _get_env_bool("SPEAK_CONFIRMATIONS", False)
    debug = _get_env_bool("DEBUG", False)
    log_level = os.getenv("LOG_LEVEL", "DEBUG" if debug else "INFO").upper()

    return Config(
        alarm_sound_path=alarm_sound_path,
        shifts_path=shifts_path,
        alert_window_seconds=alert_window_seconds,
        tick_interval_ms=tick_interval_ms,
        countdown_display_seconds=countdown_display_seconds,
        vibration_enabled=vibration_enabled,
        vibration_pattern_ms=vibration_pattern_ms,
        default_mode=default_mode,
        default_manual_time=default_manual_time,
        default_shift=default_shift,
        speak_confirmations=speak_confirmations,
        debug=debug,
        log_level=log_level,
    )


def setup_logging(log_level: str = "INFO", logs_dir: Path = Path("logs")) -> None:
    logs_dir.mkdir(exist_ok=True)

    log_path = logs_dir / "alarm.log"
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    file_handler = logging.handlers.RotatingFileHandler(
        log_path, maxBytes=1_000_000, backupCount=3, encoding="utf-8"
    )
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        handlers=[file_handler, console_handler],
    )
