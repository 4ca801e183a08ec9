"""
Application layer package.

One use case per module, each exposing a single ``execute`` method.
Use cases take DTOs in and hand DTOs back, and depend on domain
services only.
"""
