"""
Pydantic data models for StackExchange search.
"""

from typing import Generic, List, Optional, Tuple, TypeVar
from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")

DEFAULT_LIMIT = 20
DEFAULT_SITES = ("stackoverflow",)


class Config(BaseModel):
    """Resolved settings for one invocation."""
    model_config = ConfigDict(frozen=True)

    limit: int = Field(DEFAULT_LIMIT, description="Maximum number of questions")
    sites: Tuple[str, ...] = Field(DEFAULT_SITES, description="Site codes in priority order")
    api_key: Optional[str] = Field(None, description="StackExchange API key (quota only)")
    lucky: bool = Field(True, description="Print only the top answer")
    duckduckgo: bool = Field(False, description="Use DuckDuckGo as search engine")

    @field_validator('limit')
    @classmethod
    def validate_limit(cls, v: int) -> int:
        """Limit must be positive."""
        if v <= 0:
            raise ValueError(f"limit must be a positive integer, got {v}")
        return v

    @field_validator('sites')
    @classmethod
    def validate_sites(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        """At least one site must be configured."""
        if not v:
            raise ValueError("at least one site must be configured")
        return v

    @property
    def site(self) -> str:
        """The site searched by this invocation (highest priority)."""
        return self.sites[0]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON persistence."""
        return self.model_dump(mode='json')

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        """Create from dictionary (JSON import)."""
        return cls.model_validate(data)


class Site(BaseModel):
    """A StackExchange site descriptor."""
    api_site_parameter: str = Field(..., description="Stable site code, e.g. 'stackoverflow'")
    site_url: str = Field(..., description="Public site URL")

    class Config:
        json_schema_extra = {
            "example": {
                "api_site_parameter": "stackoverflow",
                "site_url": "https://stackoverflow.com"
            }
        }


class Answer(BaseModel):
    """StackExchange answer, limited to the fields selected by the API filter."""
    id: int = Field(..., alias="answer_id")
    score: int
    body: str = Field(..., alias="body_markdown")
    is_accepted: bool

    class Config:
        populate_by_name = True


class Question(BaseModel):
    """StackExchange question with its answers."""
    id: int = Field(..., alias="question_id")
    score: int
    title: str
    body: str = Field(..., alias="body_markdown")
    answers: List[Answer] = Field(default_factory=list)

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "question_id": 11227809,
                "score": 27000,
                "title": "Why is processing a sorted array faster?",
                "body_markdown": "Here is a piece of C++ code...",
                "answers": [
                    {
                        "answer_id": 11227902,
                        "score": 34000,
                        "body_markdown": "You are a victim of branch prediction fail.",
                        "is_accepted": True
                    }
                ]
            }
        }


class ResponseWrapper(BaseModel, Generic[T]):
    """Envelope wrapping every StackExchange API response."""
    items: List[T]
