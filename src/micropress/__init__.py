"""micropress — a Micropub endpoint that publishes posts as markdown files."""

__version__ = "0.3.0"
