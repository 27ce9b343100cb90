"""HTTP routers for the travel BFF operational API."""
