"""Settlement and claim engine for daily numbers-game lottery tickets."""

__version__ = "0.1.0"
