"""
Cross-cutting concerns used by every layer: error mapping, security
middleware, rate limiting, logging configuration and keyed locks.
"""
