"""Cash Flow Tracker package."""

__all__ = [
    "config",
    "exceptions",
    "logger",
    "models",
    "db",
    "repository",
    "service",
    "analytics",
    "data_loader",
    "reports",
    "webapp",
    "cli",
]

__version__ = "0.1.0"
