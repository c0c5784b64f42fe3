"""Prompt Canvas - FastAPI REST API layer.

This package contains the FastAPI application, the HTTP-only Pydantic
models, and the gallery reconciliation helpers.

Modules
-------
main
    FastAPI application factory, route handlers, and the ``main()`` CLI
    entry point.
models
    Pydantic models for request and response payloads.
gallery_store
    Content-directory scan pairing image files with metadata sidecars.
"""
