"""Infrastructure layer for the form validation engine.

The infrastructure layer contains the mechanics the application services
rely on:
- Request lifecycle state machine (scheduled / running / superseded)
- Fault containment decorators for rule evaluation

This layer depends on the domain layer only.
"""
