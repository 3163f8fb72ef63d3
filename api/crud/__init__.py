"""
Ownership-scoped transactional CRUD.

One engine serves every resource (users, contacts, phone numbers). A
`ResourceSchema` describes the table, who owns a row and which child
collection travels with it; the engine composes the ownership guard, the
partial update builder and the child collection replacer around it.
"""

from .engine import CrudEngine
from .errors import CrudError, Forbidden, NoFieldsProvided, NotFound, NothingToUpdate
from .guard import Verdict
from .pagination import Page
from .schema import ChildSchema, ResourceSchema

__all__ = [
    "ChildSchema",
    "CrudEngine",
    "CrudError",
    "Forbidden",
    "NoFieldsProvided",
    "NotFound",
    "NothingToUpdate",
    "Page",
    "ResourceSchema",
    "Verdict",
]
