"""Internal implementation package; import public names from ``seamweld``."""
