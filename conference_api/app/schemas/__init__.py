"""
Pydantic schema definitions for API payloads.

Registrations and enrollments each define their own Pydantic models
for request and response bodies.  Schemas are separated from the
database layer to decouple API representation from persistence.
"""
