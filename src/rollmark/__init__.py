"""rollmark - attendance and grade entry for course roster workbooks."""

__version__ = "0.1.0"
