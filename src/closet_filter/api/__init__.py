"""HTTP API for browsing and filtering the closet."""
