"""Graph algorithms: lifecycle base, breadth-first search, flows and matching."""
