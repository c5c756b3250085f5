"""HTTP API for mail dispatch service."""
