from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from PySide6.QtCore import QIODevice, QSaveFile

from .state_machine import DEFAULT_BOOP_TRANSITIONS, DisplayState


def _default_transitions() -> dict[int, str]:
    return {count: state.name for count, state in DEFAULT_BOOP_TRANSITIONS.items()}


@dataclass(slots=True)
class ShakeConfig:
    min_duration_ms: int = 500
    sensitivity_px: int = 10
    check_interval_ms: int = 400


@dataclass(slots=True)
class InteractionConfig:
    boop_timeout_ms: int = 1_000
    scared_recovery_ms: int = 1_000
    inactive_timeout_ms: int = 4_000
    boop_transitions: dict[int, str] = field(default_factory=_default_transitions)

    def transition_table(self) -> dict[int, DisplayState]:
        return {count: DisplayState[name] for count, name in sorted(self.boop_transitions.items())}


@dataclass(slots=True)
class AppearanceConfig:
    window_width: int = 400
    start_x: int = 400
    start_y: int = 100
    default_pony: str = ""


@dataclass(slots=True)
class BehaviorConfig:
    debug_mode: bool = False
    ponies_dir: str = ""  # empty -> bundled assets/ponies


@dataclass(slots=True)
class AppConfig:
    version: str = "1.0.0"
    shake: ShakeConfig = field(default_factory=ShakeConfig)
    interaction: InteractionConfig = field(default_factory=InteractionConfig)
    appearance: AppearanceConfig = field(default_factory=AppearanceConfig)
    behavior: BehaviorConfig = field(default_factory=BehaviorConfig)


def _int(payload: dict[str, Any], key: str, default: int, low: int, high: int) -> int:
    try:
        value = int(payload.get(key, default))
    except (TypeError, ValueError):
        value = default
    return max(low, min(high, value))


class ConfigManager:
    """Load app runtime configuration from JSON with safe defaults."""

    def __init__(self, config_path: Path):
        self._config_path = config_path

    @property
    def path(self) -> Path:
        return self._config_path

    def load(self) -> AppConfig:
        if not self._config_path.exists():
            return AppConfig()
        try:
            raw = json.loads(self._config_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return AppConfig()
        if not isinstance(raw, dict):
            return AppConfig()

        return AppConfig(
            version=str(raw.get("version", "1.0.0")),
            shake=self._build_shake(raw.get("shake")),
            interaction=self._build_interaction(raw.get("interaction")),
            appearance=self._build_appearance(raw.get("appearance")),
            behavior=self._build_behavior(raw.get("behavior")),
        )

    def save(self, config: AppConfig) -> bool:
        payload = self.to_dict(config)
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps(payload, ensure_ascii=False, indent=2) + "\n"
        try:
            saver = QSaveFile(str(self._config_path))
            if not saver.open(QIODevice.OpenModeFlag.WriteOnly | QIODevice.OpenModeFlag.Truncate):
                return False
            raw = content.encode("utf-8")
            written = saver.write(raw)
            if written != len(raw):
                saver.cancelWriting()
                return False
            if not saver.commit():
                return False
        except Exception:
            return False
        return True

    def remember_default_pony(self, config: AppConfig, name: str) -> bool:
        """Persist ``name`` as the pony opened on start. Returns True when written."""
        name = name.strip()
        if not name or name == config.appearance.default_pony:
            return False
        config.appearance.default_pony = name
        return self.save(config)

    @staticmethod
    def to_dict(config: AppConfig) -> dict[str, Any]:
        return {
            "version": str(config.version),
            "shake": {
                "min_duration_ms": int(config.shake.min_duration_ms),
                "sensitivity_px": int(config.shake.sensitivity_px),
                "check_interval_ms": int(config.shake.check_interval_ms),
            },
            "interaction": {
                "boop_timeout_ms": int(config.interaction.boop_timeout_ms),
                "scared_recovery_ms": int(config.interaction.scared_recovery_ms),
                "inactive_timeout_ms": int(config.interaction.inactive_timeout_ms),
                "boop_transitions": {
                    str(count): str(name) for count, name in sorted(config.interaction.boop_transitions.items())
                },
            },
            "appearance": {
                "window_width": int(config.appearance.window_width),
                "start_x": int(config.appearance.start_x),
                "start_y": int(config.appearance.start_y),
                "default_pony": str(config.appearance.default_pony),
            },
            "behavior": {
                "debug_mode": bool(config.behavior.debug_mode),
                "ponies_dir": str(config.behavior.ponies_dir),
            },
        }

    @staticmethod
    def _build_shake(payload: Any) -> ShakeConfig:
        if not isinstance(payload, dict):
            return ShakeConfig()
        return ShakeConfig(
            min_duration_ms=_int(payload, "min_duration_ms", 500, 0, 60_000),
            sensitivity_px=_int(payload, "sensitivity_px", 10, 0, 10_000),
            check_interval_ms=_int(payload, "check_interval_ms", 400, 16, 10_000),
        )

    @staticmethod
    def _build_interaction(payload: Any) -> InteractionConfig:
        if not isinstance(payload, dict):
            return InteractionConfig()
        return InteractionConfig(
            boop_timeout_ms=_int(payload, "boop_timeout_ms", 1_000, 1, 600_000),
            scared_recovery_ms=_int(payload, "scared_recovery_ms", 1_000, 0, 600_000),
            inactive_timeout_ms=_int(payload, "inactive_timeout_ms", 4_000, 1, 3_600_000),
            boop_transitions=ConfigManager._build_transitions(payload.get("boop_transitions")),
        )

    @staticmethod
    def _build_transitions(payload: Any) -> dict[int, str]:
        if not isinstance(payload, dict):
            return _default_transitions()
        transitions: dict[int, str] = {}
        for raw_count, raw_name in payload.items():
            try:
                count = int(raw_count)
            except (TypeError, ValueError):
                continue
            name = str(raw_name).strip().upper()
            if count < 1 or name not in DisplayState.__members__:
                continue
            transitions[count] = name
        return dict(sorted(transitions.items())) or _default_transitions()

    @staticmethod
    def _build_appearance(payload: Any) -> AppearanceConfig:
        if not isinstance(payload, dict):
            return AppearanceConfig()
        return AppearanceConfig(
            window_width=_int(payload, "window_width", 400, 100, 2_000),
            start_x=_int(payload, "start_x", 400, -100_000, 100_000),
            start_y=_int(payload, "start_y", 100, -100_000, 100_000),
            default_pony=str(payload.get("default_pony", "")).strip(),
        )

    @staticmethod
    def _build_behavior(payload: Any) -> BehaviorConfig:
        if not isinstance(payload, dict):
            return BehaviorConfig()
        return BehaviorConfig(
            debug_mode=bool(payload.get("debug_mode", False)),
            ponies_dir=str(payload.get("ponies_dir", "")).strip(),
        )
