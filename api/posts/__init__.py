"""Post catalog and image uploads."""
