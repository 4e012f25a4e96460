"""Circuit domain: records, validation and the operator workflow."""
