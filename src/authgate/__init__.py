"""authgate: authentication-mode resolution, audit identity and tool authorization."""

__version__ = "0.1.0"
