"""jobkeywords — weighted keyword extraction from job posting pages."""

__version__ = "0.1.0"
