from pydantic import BaseModel, ConfigDict, Field, StrictStr
from typing import Any, Dict, List

from string_analyzer.models.string_record import StringRecord


class StringCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    value: StrictStr = Field(..., min_length=1, description="String to analyze")


class StringProperties(BaseModel):
    length: int
    is_palindrome: bool
    unique_characters: int
    word_count: int
    sha256_hash: str
    character_frequency_map: Dict[str, int]


class StringResponse(BaseModel):
    id: str
    value: str
    properties: StringProperties
    created_at: str

    @classmethod
    def from_record(cls, record: StringRecord) -> "StringResponse":
        return cls(
            id=record.sha256_hash,
            value=record.value,
            properties=StringProperties(
                length=record.length,
                is_palindrome=record.is_palindrome,
                unique_characters=record.unique_characters,
                word_count=record.word_count,
                sha256_hash=record.sha256_hash,
                character_frequency_map=record.frequency_map,
            ),
            created_at=record.created_at,
        )


class StringListResponse(BaseModel):
    data: List[StringResponse]
    count: int
    filters_applied: Dict[str, Any]


class InterpretedQuery(BaseModel):
    original: str
    parsed_filters: Dict[str, Any]


class NaturalLanguageResponse(BaseModel):
    data: List[StringResponse]
    count: int
    interpreted_query: InterpretedQuery
