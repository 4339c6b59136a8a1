"""
VidVault - a browsable video library with per-video permissions.
"""

__version__ = "0.1.0"
