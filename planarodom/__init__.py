"""Planar laser odometry from range scans, with pose, sensor and statistics utilities."""

__version__ = "0.1.0"