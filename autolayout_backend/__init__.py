"""HTTP backend exposing the auto layout engine."""
