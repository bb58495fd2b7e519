from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from string_analyzer.database import get_db
from string_analyzer.crud import strings as crud
from string_analyzer.schemas.strings import (
    InterpretedQuery,
    NaturalLanguageResponse,
    StringCreate,
    StringListResponse,
    StringResponse,
)
from string_analyzer.services.filters import (
    FilterValidationError,
    parse_natural_language_query,
    parse_query_filters,
)

router = APIRouter()
logger = logging.getLogger(__name__)

NOT_FOUND = {"error": "String does not exist"}


@router.post("/strings", response_model=StringResponse, status_code=status.HTTP_201_CREATED)
def create_string(string_data: StringCreate, db: Session = Depends(get_db)):
    """
    Analyze and store a string.
    Returns 409 if the string is already recorded.
    """
    try:
        record = crud.create_string_record(db, string_data.value)
    except crud.StringAlreadyExistsError:
        logger.info("Rejected duplicate string")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error": "String already exists"}
        )

    logger.info(f"Stored string {record.sha256_hash}")
    return StringResponse.from_record(record)


# Registered before /strings/{string_value:path} so the literal path is not shadowed
@router.get("/strings/filter-by-natural-language", response_model=NaturalLanguageResponse)
def filter_by_natural_language(
    query: Optional[str] = Query(None, description="Natural language query"),
    db: Session = Depends(get_db)
):
    """
    Filter strings using a natural language query.
    Example: "all single word palindromic strings"
    """
    if not query:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": 'Missing "query" query parameter'}
        )

    filters = parse_natural_language_query(query)
    if filters.is_empty():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Unable to parse natural language query"}
        )

    records = crud.list_string_records(db, filters)
    data = [StringResponse.from_record(r) for r in records]

    return NaturalLanguageResponse(
        data=data,
        count=len(data),
        interpreted_query=InterpretedQuery(
            original=query,
            parsed_filters=filters.applied()
        )
    )


@router.get("/strings/{string_value:path}", response_model=StringResponse)
def get_string(string_value: str, db: Session = Depends(get_db)):
    """
    Get the analysis of a specific string.
    """
    record = crud.get_string_record(db, string_value)
    if not record:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    return StringResponse.from_record(record)


@router.delete("/strings/{string_value:path}", status_code=status.HTTP_204_NO_CONTENT)
def delete_string(string_value: str, db: Session = Depends(get_db)):
    """
    Delete a string from the system.
    """
    if not crud.delete_string_record(db, string_value):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    logger.info("Deleted string")
    return None


@router.get("/strings", response_model=StringListResponse)
def get_all_strings(
    is_palindrome: Optional[str] = Query(None, description="'true' or 'false'"),
    min_length: Optional[str] = Query(None, description="Minimum length (inclusive)"),
    max_length: Optional[str] = Query(None, description="Maximum length (inclusive)"),
    word_count: Optional[str] = Query(None, description="Exact word count"),
    contains_character: Optional[str] = Query(None, description="Substring the value must contain"),
    db: Session = Depends(get_db)
):
    """
    Get all strings with optional filtering.
    """
    try:
        filters = parse_query_filters({
            "is_palindrome": is_palindrome,
            "min_length": min_length,
            "max_length": max_length,
            "word_count": word_count,
            "contains_character": contains_character,
        })
    except FilterValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": str(e), "details": e.errors}
        )

    records = crud.list_string_records(db, filters)
    data = [StringResponse.from_record(r) for r in records]

    return StringListResponse(
        data=data,
        count=len(data),
        filters_applied=filters.applied()
    )
