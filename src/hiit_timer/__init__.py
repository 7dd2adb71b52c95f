"""hiit-timer: guided interval-training sessions in the terminal."""

__version__ = "0.1.0"
