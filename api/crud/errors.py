"""
CRUD outcome errors.

These carry no transport details; `main.py` maps each class to a status
code. Store failures are `core.db.StoreError`.
"""

from __future__ import annotations


class CrudError(RuntimeError):
    pass


class NotFound(CrudError):
    def __init__(self, resource: str, resource_id: object) -> None:
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource.capitalize()} not found.")


class Forbidden(CrudError):
    def __init__(self, resource: str, resource_id: object) -> None:
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"Not authorized to access this {resource}.")


class NoFieldsProvided(CrudError):
    def __init__(self, message: str = "No valid fields to update.") -> None:
        super().__init__(message)


class NothingToUpdate(NoFieldsProvided):
    pass
