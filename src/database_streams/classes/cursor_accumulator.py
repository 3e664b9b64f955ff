from __future__ import annotations
from types import MappingProxyType
from typing import Any, Mapping

from .cursor_handle import CursorHandle


# Rows fetched per pull when the caller does not set options["batch_size"]
DEFAULT_BATCH_SIZE:int = 500


class CursorAccumulator(object): 
    """State carried between pulls of one stream. Nothing in it changes after construction."""

    __slots__ = ("_handle", "_columns", "_batch_size", "_source_options")


    def __init__(self, handle:CursorHandle, columns:list[str], batch_size:int|None=None, source_options:Mapping[str, Any]|None=None): 
        if batch_size is None: 
            batch_size = DEFAULT_BATCH_SIZE
        if isinstance(batch_size, bool) or not isinstance(batch_size, int) or batch_size < 1: 
            raise ValueError(f'batch_size must be a positive integer, got {batch_size!r}')

        self._handle = handle
        self._columns = tuple(columns)
        self._batch_size = batch_size
        self._source_options = MappingProxyType(dict(source_options or {}))


    @property
    def handle(self) -> CursorHandle: 
        return self._handle

    @property
    def columns(self) -> tuple[str, ...]: 
        return self._columns

    @property
    def batch_size(self) -> int: 
        return self._batch_size

    @property
    def source_options(self) -> Mapping[str, Any]: 
        return self._source_options


    def __repr__(self) -> str: 
        return f'<CursorAccumulator handle={self._handle!r} columns={list(self._columns)} batch_size={self._batch_size}>'
