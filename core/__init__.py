"""Core data model and raster algorithms (no widgets)."""
