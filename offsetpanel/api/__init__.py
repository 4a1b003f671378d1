"""REST client for the pricing API."""
