"""Command-line maintenance scripts for Quillpost."""
