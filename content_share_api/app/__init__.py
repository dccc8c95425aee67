"""
Application package initializer.

The project is organised into logical pieces: ``core`` holds
configuration, logging, the datastore handle and the error taxonomy;
``schemas`` defines the Pydantic payloads; ``services`` holds the
stores and the business workflows; ``api`` exposes versioned routers.
Jobs and posts share one resource schema and one router factory, so a
new resource kind only needs an entry in ``ResourceKind`` and a
migration.

The application object itself lives in ``app.main`` and is not
imported here, so the stores and services can be used without
building a FastAPI app.
"""
