"""HTTP interface of the brokerage context: routers, schemas and dependency wiring."""
