"""HTTP service for the workspace index."""
