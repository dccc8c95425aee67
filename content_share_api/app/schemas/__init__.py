"""
Pydantic schema definitions for API payloads.

Jobs and posts share the resource schemas; users carry their
interaction back-references.  Schemas are separated from storage rows
to decouple API representation from persistence.
"""
