"""Core types, keys and errors shared by every pipeline stage."""
