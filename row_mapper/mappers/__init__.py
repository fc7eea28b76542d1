"""CRUD mappers bound to an entity type and a shared connection."""

from row_mapper.mappers.base import BaseMapper, WriteMapper
from row_mapper.mappers.delete import DeleteMapper
from row_mapper.mappers.insertion import InsertionMapper
from row_mapper.mappers.query import QueryMapper
from row_mapper.mappers.update import UpdateMapper

__all__ = [
    "BaseMapper",
    "DeleteMapper",
    "InsertionMapper",
    "QueryMapper",
    "UpdateMapper",
    "WriteMapper",
]
