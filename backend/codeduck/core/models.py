"""Data models for codeduck."""

from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional

from pydantic import BaseModel

CODE_SPACE = "code"
TEXT_SPACE = "nlp"
CODE_DIM = 768
TEXT_DIM = 384


class CodeKind(str, Enum):
    FUNCTION = "Function"
    STRUCT = "Struct"
    ENUM = "Enum"
    IMPL_METHOD = "ImplMethod"


class Context(BaseModel):
    """Where an entity lives and the source text it was cut from."""

    module: str
    file_path: str
    file_name: str
    enclosing_type: Optional[str] = None
    snippet: Optional[str] = None


class CodeEntity(BaseModel):
    """A single indexable declaration.

    The field names double as the payload schema stored in the vector
    index, so renaming any of them breaks readers of existing collections.
    """

    name: str
    signature: str
    kind: CodeKind
    docstring: Optional[str] = None
    line: int
    line_from: int
    line_to: int
    context: Optional[Context] = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "CodeEntity":
        return cls.model_validate(payload)

    def canonical_text(self) -> str:
        """Pretty-printed JSON form fed to the embedding models."""
        return self.model_dump_json(indent=2)

    @classmethod
    def from_canonical_text(cls, text: str) -> "CodeEntity":
        return cls.model_validate_json(text)


@dataclasses.dataclass
class Embedding:
    """An entity together with its vectors in both spaces."""

    entity: CodeEntity
    code_vector: List[float]
    text_vector: List[float]

    def to_vector_map(self) -> Dict[str, List[float]]:
        return {
            CODE_SPACE: self.code_vector,
            TEXT_SPACE: self.text_vector,
        }


class QueryVectors(NamedTuple):
    code: List[float]
    text: List[float]


@dataclasses.dataclass
class SearchHit:
    """One search result with the space it came from and its similarity."""

    space: str
    score: float
    entity: CodeEntity
