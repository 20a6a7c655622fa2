"""Application layer – scheduling of deferred work."""
