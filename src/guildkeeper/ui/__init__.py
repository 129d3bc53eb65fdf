"""Interactive admin console."""
