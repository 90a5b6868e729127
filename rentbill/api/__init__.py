"""HTTP API: bill record store and renter endpoints."""
