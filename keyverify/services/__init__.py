"""Verification services: validators, collaborators and the run pipeline."""
