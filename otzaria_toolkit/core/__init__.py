"""GUI-agnostic core of the toolkit: models, markup helpers and services."""
