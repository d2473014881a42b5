"""HTTP feature modules."""
