"""Lumo collaborative blogging backend."""

__version__ = "0.1.0"
