"""Move per-user channels and tracks into the relational schema."""

__version__ = "0.3.0"
