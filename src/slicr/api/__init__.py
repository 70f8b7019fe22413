"""HTTP API for Slicr."""
