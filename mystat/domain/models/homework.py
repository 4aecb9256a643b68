"""Enumerations used by the homework endpoints."""

from __future__ import annotations

from enum import IntEnum


class HomeworkType(IntEnum):
    HOMEWORK = 0
    LAB = 1


class HomeworkStatus(IntEnum):
    """Homework filter understood by ``homework/operations/list``."""

    CHECKED = 1
    UPLOADED = 2
    ACTIVE = 3
    DELETED = 5
    OVERDUE = 6


__all__ = ["HomeworkStatus", "HomeworkType"]
