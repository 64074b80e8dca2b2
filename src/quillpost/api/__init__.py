"""HTTP API for Quillpost."""
