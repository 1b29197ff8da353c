"""Local hosts-file profile switcher with a StevenBlack-synced SAFE profile."""

__version__ = "1.0.0"
