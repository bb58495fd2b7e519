import json
from typing import Dict

from sqlalchemy import Boolean, Column, Integer, String, Text

from string_analyzer.database import Base


class StringRecord(Base):
    __tablename__ = "strings"

    value = Column(Text, primary_key=True)
    sha256_hash = Column(String(64), nullable=False, index=True)
    length = Column(Integer, nullable=False)
    is_palindrome = Column(Boolean, nullable=False)
    unique_characters = Column(Integer, nullable=False)
    word_count = Column(Integer, nullable=False)
    character_frequency_map = Column(Text, nullable=False)  # JSON object
    created_at = Column(String(40), nullable=False)  # ISO-8601, UTC

    @property
    def frequency_map(self) -> Dict[str, int]:
        """Character frequency map materialized from its stored JSON text."""
        return json.loads(self.character_frequency_map)

    def __repr__(self):
        return f"<StringRecord sha256={self.sha256_hash[:12]} length={self.length}>"
