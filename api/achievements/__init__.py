"""Student achievement badges."""
