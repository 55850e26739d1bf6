"""gameloc: localization toolkit for video-game text files."""

__version__ = "0.1.0"
