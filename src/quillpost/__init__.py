"""Quillpost: a personal blogging back end over a document store."""

__version__ = "0.1.0"
