"""Image catalog and the job image resolution engine."""
