"""
Clipstudy - media extraction toolkit for language study material.

Probes video and audio containers with ffprobe and extracts still images
and timed audio clips with ffmpeg, batching requests into as few decode
passes as possible.
"""

__version__ = "0.1.0"
