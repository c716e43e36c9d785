"""Domain layer — result model, errors and ports. No infrastructure imports."""
