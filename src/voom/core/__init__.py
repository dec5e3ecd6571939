"""Core algorithms: ancestry index, tags, versions, manifests, scanning and resolution."""
