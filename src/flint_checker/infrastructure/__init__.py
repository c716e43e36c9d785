"""Infrastructure layer — concrete validators, policy engine and format plugins."""
