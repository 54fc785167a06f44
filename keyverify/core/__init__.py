"""Configuration, logging and clock primitives."""
