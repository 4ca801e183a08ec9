"""
Interfaces layer package.

FastAPI routers and Pydantic request/response schemas.
Routes call use cases and return responses.
"""
