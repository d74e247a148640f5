"""Package version tag, echoed in every rendering report."""

__version__ = "1.1.0"
