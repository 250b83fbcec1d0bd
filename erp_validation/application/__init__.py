"""Application layer of the form validation engine.

This layer orchestrates the validation building blocks: it decides when a
field is validated, caches and times the results, classifies failures and
reduces everything to the form summary.

Architecture Pattern: Clean Architecture
- Services: Reusable application logic (one class per file)
- The engine facade (erp_validation.engine) composes the services
"""
