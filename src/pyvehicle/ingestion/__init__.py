"""Ingestion helpers.

Pure functions that turn loosely-typed server records into the fixed
vehicle models. Nothing here performs I/O or touches session state.
"""
