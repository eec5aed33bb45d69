"""Adapters connecting the core to runtimes, storage and networks."""
