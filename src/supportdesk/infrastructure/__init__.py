"""Cross-context infrastructure: database engine and unit-of-work implementations."""
