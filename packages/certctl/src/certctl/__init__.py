__version__ = "0.1.0"

__all__ = [
    "__version__",
    "catalog",
    "checks",
    "cli",
    "config",
    "contracts",
    "core",
    "environment",
    "errors",
    "exit_codes",
    "labels",
    "reporting",
    "verify",
]
