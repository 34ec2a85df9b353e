"""External services used by the operator."""
