"""On-demand timelapse videos and archives from timestamp-named frames."""

__version__ = "0.1.0"
