"""Article Importer: load JATS and A++ article exports into a journal repository."""

__version__ = "0.1.0"
