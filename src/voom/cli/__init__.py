"""Command-line interface: click commands and rich output."""
