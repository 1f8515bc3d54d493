"""Core types, configuration and errors for swiftgraft."""
