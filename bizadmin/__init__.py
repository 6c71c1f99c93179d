"""Business administration back office: records, reporting, exports and scheduling."""

__version__ = "1.0.0"
