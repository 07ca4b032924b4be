"""Language assistant backend."""
