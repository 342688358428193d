"""Input validation helpers with XSS protection"""

from pydantic import BaseModel, Field, field_validator
import re


class SafeStringMixin:
    """Mixin for XSS-safe string validation"""

    @staticmethod
    def validate_no_script(value: str) -> str:
        """Block common XSS patterns"""
        if not value:
            return value

        dangerous_patterns = [
            r'<script[^>]*>',
            r'javascript:',
            r'<iframe',
        ]

        for pattern in dangerous_patterns:
            if re.search(pattern, value, re.IGNORECASE):
                raise ValueError("Invalid characters detected")

        return value


class SearchQuerySchema(BaseModel, SafeStringMixin):
    """Validated catalog search query"""
    query: str = Field(..., min_length=1, max_length=200)

    @field_validator('query')
    @classmethod
    def clean_query(cls, v):
        return cls.validate_no_script(v.strip())
