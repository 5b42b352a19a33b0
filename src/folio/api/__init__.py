"""Folio -- HTTP layer.

This package contains the FastAPI application, the request pipeline and the
handlers for the generated routes.

Modules
-------
main
    Application factory (``create_app``) and the ``main()`` CLI entry point.
pipeline
    Ordered security gates and the driver that runs them.
handlers
    ``/og.png`` and ``/sitemap.xml`` handlers.
asset_store
    Read-only, root-confined access to the static site directory.
sitemap
    Static and discovery sitemap sources plus XML serialization.
models
    Pydantic models (sitemap entries).
"""
