"""TUI Gantt - timeline layout engine with a terminal chart."""

__version__ = "0.1.0"
