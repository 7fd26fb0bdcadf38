"""Portfolio CMS backend: public portfolio API plus the admin content API."""

__version__ = "1.0.0"
