# posture_monitor/__main__.py
"""
Run posture monitoring from the command line.

Usage
-----
    python -m posture_monitor                          # webcam 0, live clock
    python -m posture_monitor --source clip.mp4 --speed 5 --start 2024-01-01T08:00
    python -m posture_monitor --demo laying --speed 5  # scripted, no video
"""

import argparse
import logging
import sys
from dataclasses import replace
from datetime import datetime

import cv2

from .config import load_config
from .demo import DemoScript, DEFAULT_DEMO_DURATION_S, run_demo
from .errors import ConfigError
from .event_log import JsonEventLog
from .labels import PostureLabel
from .overlay import draw_overlay
from .pipeline import MonitoringSession
from .sim_clock import LiveClock, SimulatedClock

logger = logging.getLogger('posture_monitor')

WINDOW_TITLE = 'Posture monitor - Q to quit'


def _parse_args(argv):
    parser = argparse.ArgumentParser(description='Real-time posture and fall monitoring')
    parser.add_argument('--source', default='0',
                        help='Webcam index (int) or path to video file')
    parser.add_argument('--config', default=None,
                        help='JSON config file (default: posture_config.json if present)')
    parser.add_argument('--speed', type=float, default=None,
                        help='Simulated minutes per real second; enables the simulated clock')
    parser.add_argument('--start', default=None,
                        help='Simulated start instant, ISO-8601 (e.g. 2024-01-01T08:00)')
    parser.add_argument('--log-file', default=None,
                        help='Where completed sessions are written')
    parser.add_argument('--no-window', action='store_true',
                        help='Do not open a preview window')
    parser.add_argument('--demo', choices=['sitting', 'laying', 'falling'], default=None,
                        help='Play a scripted session instead of running pose inference')
    parser.add_argument('--verbose', '-v', action='store_true')
    return parser.parse_args(argv)


def _build_config(args):
    config = load_config(args.config)
    sim = config.simulation
    if args.speed is not None:
        sim = replace(sim, speed_multiplier=args.speed)
    if args.start is not None:
        try:
            sim = replace(sim, start=datetime.fromisoformat(args.start))
        except ValueError as exc:
            raise ConfigError(f'Invalid --start {args.start!r}') from exc
    simulated = config.simulated or args.speed is not None or args.start is not None
    config = replace(config, simulation=sim, simulated=simulated)
    if args.log_file:
        config = replace(config, log_file=args.log_file)
    return config


def _run_demo(args, config, sink) -> int:
    script = DemoScript(
        event_type=PostureLabel(args.demo),
        duration_s=config.simulation.video_duration_s or DEFAULT_DEMO_DURATION_S,
    )
    clock  = SimulatedClock.from_config(config.simulation)
    result = run_demo(script, clock, config.thresholds, sink)

    for event in result.events:
        print(f'{event.timestamp}  {event.type.value:<9} {event.duration_text:>10}'
              f"{'  CRITICAL' if event.is_critical else ''}")
    return 0


def _run_live(args, config, sink) -> int:
    # Imported here so --demo works without the MediaPipe runtime
    from .pose_estimator import PoseEstimator
    from .runner import MonitorRunner

    source = args.source
    try:
        source = int(source)
    except ValueError:
        pass   # file path

    try:
        estimator = PoseEstimator(config.pose)
    except RuntimeError as exc:
        logger.error('%s', exc)
        return 1

    cap = cv2.VideoCapture(source)
    if not cap.isOpened():
        logger.error('Cannot open source: %s', source)
        estimator.close()
        return 1

    simulated = config.simulated
    if simulated:
        clock = SimulatedClock.from_config(config.simulation)
    else:
        clock = LiveClock()

    session   = MonitoringSession(config.thresholds, started_at=clock.now(0.0))
    runner    = MonitorRunner(
        cap, estimator, session, sink,
        clock=clock,
        media_time=isinstance(source, str),
        max_elapsed_s=config.simulation.video_duration_s if simulated else None,
    )

    logger.info('Monitoring %s (%s clock), press Q to quit',
                source, 'simulated' if simulated else 'live')
    try:
        for frame, result, now in runner.iter_results():
            if args.no_window:
                continue
            annotated = draw_overlay(frame, result, now, config.thresholds.min_visibility)
            cv2.imshow(WINDOW_TITLE, annotated)
            if cv2.waitKey(1) & 0xFF in (ord('q'), ord('Q')):
                runner.stop()
    except KeyboardInterrupt:
        runner.stop()
    finally:
        runner.close()
        estimator.close()
        if not args.no_window:
            cv2.destroyAllWindows()

    logger.info('Processed %d frames (%d failed), %d events',
                runner.frames_processed, runner.frames_failed, runner.events_emitted)
    return 0


def main(argv=None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    )

    try:
        config = _build_config(args)
    except ConfigError as exc:
        logger.error('Configuration error: %s', exc)
        return 2

    sink = JsonEventLog(config.log_file)

    if args.demo:
        status = _run_demo(args, config, sink)
    else:
        status = _run_live(args, config, sink)

    summary = sink.summary()
    logger.info('Events: %d total, %d falls, saved to %s',
                summary['total_events'], summary['fall_count'], config.log_file)
    return status


if __name__ == '__main__':
    sys.exit(main())
