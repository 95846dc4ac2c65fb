# -*- coding: utf-8 -*-
from __future__ import annotations

import re
from typing import Any, Iterable, Optional, Tuple, Type

from langchain_core.exceptions import OutputParserException
from langchain_core.output_parsers import BaseOutputParser
from pydantic import BaseModel, Field

from .models import ModelReader
from .prompting import build_layout_instructions
from .reader import ParserConfig

_CODE_FENCE_RE = re.compile(r"^\s*```[A-Za-z0-9_-]*[ \t]*\r?\n(.*?)```\s*$", flags=re.DOTALL)


def strip_code_fence(text: str) -> str:
    m = _CODE_FENCE_RE.match(text or "")
    if m:
        return m.group(1)
    return text or ""


class ShapeOutputParser(BaseOutputParser[BaseModel]):
    """LangChain output parser for line-oriented model output."""

    pydantic_model: Type[BaseModel] = Field(default=None)
    hints: Tuple[int, ...] = ()
    delimiter: str = " "
    cfg: ParserConfig = Field(default_factory=ParserConfig)
    _reader: Any = None

    def __init__(
        self,
        model: Type[BaseModel],
        hints: Iterable[int] = (),
        delimiter: str = " ",
        cfg: Optional[ParserConfig] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        object.__setattr__(self, 'pydantic_model', model)
        object.__setattr__(self, 'hints', tuple(hints))
        object.__setattr__(self, 'delimiter', delimiter)
        object.__setattr__(self, 'cfg', cfg or ParserConfig())
        object.__setattr__(self, '_reader', ModelReader(model, cfg=self.cfg))

    def get_format_instructions(self) -> str:
        return build_layout_instructions(self._reader.shape, self.hints, self.delimiter)

    def parse(self, text: str) -> BaseModel:
        try:
            return self._reader.parse(strip_code_fence(text), self.hints, self.delimiter)
        except Exception as e:
            raise OutputParserException(str(e)) from e

    def decode(self, text: str) -> dict:
        """Read the text into a dict without pydantic validation."""
        return self._reader.decode(strip_code_fence(text), self.hints, self.delimiter)

    @property
    def _type(self) -> str:
        return "linecast"
