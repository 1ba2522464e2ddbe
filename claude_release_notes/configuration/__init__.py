"""Configuration loading and command line interface."""
