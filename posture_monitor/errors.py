# posture_monitor/errors.py


class PostureMonitorError(Exception):
    """Base class for every error raised by posture_monitor."""


class ConfigError(PostureMonitorError, ValueError):
    """A configuration value is missing, unknown or out of range."""


class KeypointTopologyError(PostureMonitorError, ValueError):
    """
    The pose collaborator returned a landmark set that is not the fixed
    33-point BlazePose topology. Usually means a mismatched model file.
    """
