"""Architecture Analysis Engine - stateless analyses over architecture snapshots."""

__version__ = "1.0.0"
