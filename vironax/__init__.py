"""VironaX marketing efficiency engine"""

__version__ = "1.0.0"
