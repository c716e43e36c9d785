"""Application layer — check orchestration, bounded execution and policy merge."""
