"""Collaborators used by the example controllers."""
