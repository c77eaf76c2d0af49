"""Core utilities shared across covsubmit."""
