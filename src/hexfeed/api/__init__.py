"""HTTP API for the Hexfeed reputation service."""
