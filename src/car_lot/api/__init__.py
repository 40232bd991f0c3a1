"""HTTP API for car-lot."""
