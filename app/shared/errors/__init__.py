"""Translation of brokerage domain errors into JSON HTTP responses."""
