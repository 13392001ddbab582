"""Per-owner media boxes with quota enforcement and opaque content addressing."""

__version__ = "1.0.0"
