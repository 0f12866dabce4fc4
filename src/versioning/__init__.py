"""Version parsing, constraint predicates and install orchestration."""
