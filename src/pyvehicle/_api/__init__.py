"""Endpoint modules: one function per remote operation, no session state."""
