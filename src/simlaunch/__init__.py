"""Launch apps in the mobile simulator and report how they finished."""

__version__ = "0.1.0"
