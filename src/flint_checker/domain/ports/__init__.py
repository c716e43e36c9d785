"""Ports — abstract collaborators the checking core depends on."""
