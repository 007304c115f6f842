"""
Shared, cross-cutting code for the API.

`core/` holds the building blocks every entity package uses: DB wiring,
settings, the error taxonomy and the generic table engine (column registry,
submission validation, filter/sort building, pagination, list/count
execution). Keep entity-specific rules and orchestration in the
corresponding package (e.g. `posts/`).
"""
