"""Domain layer of the form validation engine.

Contains the engine's data model: immutable value objects, result entities
and exceptions. Nothing in this package performs validation itself.
"""
