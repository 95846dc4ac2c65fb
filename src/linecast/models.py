# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import IO, Any, Dict, Iterable, Type, Union

from pydantic import BaseModel

from .inference import compact_depth, depth, shape_from_model
from .line_source import LineSource
from .reader import ParserConfig, StructuredReader

Source = Union[LineSource, IO, str, bytes]


class ModelReader:
    """Reads pydantic models whose fields map onto lines.

    The shape comes from the model's JSON schema (see ``shape_from_model``);
    ``decode`` returns the raw dict, ``parse`` validates it into the model.
    """

    def __init__(self, model: Type[BaseModel], cfg: ParserConfig = ParserConfig()):
        self.model = model
        self.cfg = cfg
        self.shape = shape_from_model(model)

    @property
    def depth(self) -> int:
        return depth(self.shape)

    @property
    def compact_depth(self) -> int:
        return compact_depth(self.shape)

    def decode(self, source: Source, hints: Iterable[int] = (), delimiter: str = " ") -> Dict[str, Any]:
        return StructuredReader(source, self.cfg).produce(self.shape, hints, delimiter)

    def parse(self, source: Source, hints: Iterable[int] = (), delimiter: str = " ") -> BaseModel:
        obj = self.decode(source, hints, delimiter)
        return self.model.model_validate(obj)
