"""nextport: convert React projects into Next.js projects."""

__version__ = "0.1.0"
