# posture_monitor/config.py
"""
Configuration for the posture engine.

Three groups, each a dataclass validated on construction:

    Thresholds        classifier cut-offs, smoothing, gating, session filter
    SimulationConfig  speed multiplier + start instant for the simulated clock
    PoseConfig        MediaPipe model settings

load_config() reads an optional JSON file and then applies overrides from
the environment (a .env file is picked up with python-dotenv). Values out
of range raise ConfigError; nothing is clamped.

Example posture_config.json
---------------------------
    {
      "thresholds": {"fall_confirm_delay_s": 4.0},
      "simulation": {"speed_multiplier": 5, "start": "2024-01-01T08:00:00"},
      "pose":       {"model_path": "models/pose_landmarker_lite.task"}
    }
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, fields, asdict
from datetime import datetime, date, time
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = 'posture_config.json'
DEFAULT_LOG_FILE    = 'posture_events.json'
DEFAULT_MODEL_PATH  = 'models/pose_landmarker_lite.task'


def _require_positive(name: str, value: float) -> None:
    if value is None or value <= 0:
        raise ConfigError(f'{name} must be > 0, got {value!r}')


def _require_non_negative(name: str, value: float) -> None:
    if value is None or value < 0:
        raise ConfigError(f'{name} must be >= 0, got {value!r}')


# ── Thresholds ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Thresholds:
    """
    Every tunable of the engine. Angles in degrees, times in seconds.

    fall_angle_deg         torso verticality below this = falling
    flat_aspect_ratio      width > height * this = falling ("starfish" shape)
    standing_angle_deg     torso verticality needed for standing
    standing_aspect_ratio  height / width above this = standing
    leg_straightness_deg   straighter-leg bend below this = standing
    smoothing_window       labels kept in the rolling history
    smoothing_quorum       agreeing labels needed for a stable label
    fall_confirm_delay_s   sustained falling needed before a fall is confirmed
    min_session_s          shorter completed sessions are dropped
    min_visibility         keypoints drawn only above this (not used to classify)
    sitting_alert_s        continuous sitting before a move reminder fires
    """
    fall_angle_deg:        float = 45.0
    flat_aspect_ratio:     float = 1.25
    standing_angle_deg:    float = 60.0
    standing_aspect_ratio: float = 1.2
    leg_straightness_deg:  float = 40.0
    smoothing_window:      int   = 5
    smoothing_quorum:      int   = 3
    fall_confirm_delay_s:  float = 5.0
    min_session_s:         float = 2.0
    min_visibility:        float = 0.5
    sitting_alert_s:       float = 45 * 60

    def __post_init__(self):
        for name in ('fall_angle_deg', 'standing_angle_deg', 'leg_straightness_deg',
                     'fall_confirm_delay_s', 'min_session_s'):
            _require_non_negative(name, getattr(self, name))
        for name in ('flat_aspect_ratio', 'standing_aspect_ratio', 'sitting_alert_s'):
            _require_positive(name, getattr(self, name))

        if self.fall_angle_deg > 90 or self.standing_angle_deg > 90:
            raise ConfigError('Torso angle thresholds must lie in [0, 90]')
        if self.leg_straightness_deg > 180:
            raise ConfigError('leg_straightness_deg must lie in [0, 180]')
        if not 0.0 <= self.min_visibility <= 1.0:
            raise ConfigError(f'min_visibility must lie in [0, 1], got {self.min_visibility!r}')

        if not isinstance(self.smoothing_window, int) or self.smoothing_window < 1:
            raise ConfigError(f'smoothing_window must be a positive int, got {self.smoothing_window!r}')
        if not isinstance(self.smoothing_quorum, int) or self.smoothing_quorum < 1:
            raise ConfigError(f'smoothing_quorum must be a positive int, got {self.smoothing_quorum!r}')
        if self.smoothing_quorum > self.smoothing_window:
            raise ConfigError('smoothing_quorum cannot exceed smoothing_window')
        # Two different labels must never both reach quorum
        if self.smoothing_quorum * 2 <= self.smoothing_window:
            raise ConfigError('smoothing_quorum must be a strict majority of smoothing_window')


# ── Simulation ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class SimulationConfig:
    """
    speed_multiplier   simulated minutes per real second
    start              simulated instant at elapsed = 0
    video_duration_s   optional real-time length of the session
    """
    speed_multiplier: float = 1.0
    start:            datetime = field(default_factory=lambda: datetime.now().replace(microsecond=0))
    video_duration_s: Optional[float] = None

    def __post_init__(self):
        _require_positive('speed_multiplier', self.speed_multiplier)
        if not isinstance(self.start, datetime):
            raise ConfigError(f'start must be a datetime, got {self.start!r}')
        if self.video_duration_s is not None:
            _require_positive('video_duration_s', self.video_duration_s)

    @classmethod
    def from_start_time(cls, on_date: date, start_time: str, speed: float,
                        video_duration_s: Optional[float] = None) -> 'SimulationConfig':
        """Build from a calendar date and an 'HH:MM' wall-clock string."""
        try:
            hours, minutes = (int(part) for part in start_time.split(':'))
            start = datetime.combine(on_date, time(hours, minutes))
        except ValueError as exc:
            raise ConfigError(f'Invalid start time {start_time!r}, expected HH:MM') from exc
        return cls(speed_multiplier=speed, start=start, video_duration_s=video_duration_s)


# ── Pose model ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PoseConfig:
    model_path:               str   = DEFAULT_MODEL_PATH
    min_detection_confidence: float = 0.5
    min_tracking_confidence:  float = 0.5

    def __post_init__(self):
        for name in ('min_detection_confidence', 'min_tracking_confidence'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigError(f'{name} must lie in [0, 1], got {value!r}')


@dataclass(frozen=True)
class AppConfig:
    thresholds: Thresholds       = field(default_factory=Thresholds)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    pose:       PoseConfig       = field(default_factory=PoseConfig)
    log_file:   str              = DEFAULT_LOG_FILE
    # True when a simulation section or POSTURE_SPEED / POSTURE_START was given
    simulated:  bool             = False

    def to_dict(self) -> dict:
        data = asdict(self)
        data['simulation']['start'] = self.simulation.start.isoformat()
        return data


# ── Loading ──────────────────────────────────────────────────────────────────

def _build(cls, section: str, values: dict[str, Any]):
    known   = {f.name for f in fields(cls)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigError(f"Unknown key(s) in '{section}': {', '.join(unknown)}")
    try:
        return cls(**values)
    except TypeError as exc:
        raise ConfigError(f"Invalid '{section}' section: {exc}") from exc


def _parse_start(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError as exc:
        raise ConfigError(f'Invalid simulation start {value!r}, expected ISO-8601') from exc


def _parse_float(name: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigError(f'{name} must be a number, got {value!r}') from exc


def load_config(path: str | os.PathLike | None = None,
                dotenv_path: str | None = None) -> AppConfig:
    """
    Load configuration from JSON, then apply environment overrides.

    Parameters
    ----------
    path : str | PathLike | None
        JSON file. If None, DEFAULT_CONFIG_FILE is used when it exists;
        an explicitly given path must exist.
    dotenv_path : str | None
        Optional .env file. If None, python-dotenv searches upward from
        the current directory.

    Environment overrides
    ---------------------
    POSTURE_SPEED, POSTURE_START, POSTURE_MODEL_PATH, POSTURE_LOG_FILE
    """
    load_dotenv(dotenv_path=dotenv_path)

    data: dict[str, Any] = {}
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigError(f'Config file not found: {config_path}')
    else:
        config_path = Path(DEFAULT_CONFIG_FILE)

    if config_path.exists():
        try:
            with open(config_path, encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ConfigError(f'Config file {config_path} is not valid JSON: {exc}') from exc
        if not isinstance(data, dict):
            raise ConfigError(f'Config file {config_path} must hold a JSON object')
        logger.info('Loaded config from %s', config_path)

    unknown = sorted(set(data) - {'thresholds', 'simulation', 'pose', 'log_file'})
    if unknown:
        raise ConfigError(f"Unknown config section(s): {', '.join(unknown)}")

    sim_values  = dict(data.get('simulation', {}))
    pose_values = dict(data.get('pose', {}))
    log_file    = data.get('log_file', DEFAULT_LOG_FILE)
    simulated   = 'simulation' in data

    if 'POSTURE_SPEED' in os.environ:
        sim_values['speed_multiplier'] = _parse_float('POSTURE_SPEED', os.environ['POSTURE_SPEED'])
        simulated = True
    if 'POSTURE_START' in os.environ:
        sim_values['start'] = os.environ['POSTURE_START']
        simulated = True
    if 'POSTURE_MODEL_PATH' in os.environ:
        pose_values['model_path'] = os.environ['POSTURE_MODEL_PATH']
    if 'POSTURE_LOG_FILE' in os.environ:
        log_file = os.environ['POSTURE_LOG_FILE']

    if 'start' in sim_values:
        sim_values['start'] = _parse_start(sim_values['start'])

    return AppConfig(
        thresholds = _build(Thresholds, 'thresholds', dict(data.get('thresholds', {}))),
        simulation = _build(SimulationConfig, 'simulation', sim_values),
        pose       = _build(PoseConfig, 'pose', pose_values),
        log_file   = log_file,
        simulated  = simulated,
    )
