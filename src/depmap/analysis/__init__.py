"""Signal producers: correlation, temporal proximity, structural siblings."""
