"""
Generation schemas for the Wordgate API
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class GenerateWordsRequest(BaseModel):
    """Body of a generation request; topic content rules are applied by the service"""
    topic: Optional[str] = Field(None, description="Topic to generate named examples for (1-100 chars)")


class WordsResponse(BaseModel):
    words: List[str] = Field(..., description="Specific, named examples for the topic")
