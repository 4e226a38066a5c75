"""Lifecycle status of resources held in the store."""

from enum import Enum


class Status(str, Enum):
    ADDED = "ADDED"
    DELETED = "DELETED"
    ERROR = "ERROR"
    EMPTY = ""
    MODIFIED = "MODIFIED"