"""Interfaces: the script-facing library and the command line."""
