"""Contact graph files and result reports."""
