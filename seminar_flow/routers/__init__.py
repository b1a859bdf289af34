"""HTTP routers of the wizard API."""
