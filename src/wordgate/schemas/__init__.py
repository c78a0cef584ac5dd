from .auth import ChallengeResponse, SessionResponse
from .generation import GenerateWordsRequest, WordsResponse

__all__ = ["ChallengeResponse", "SessionResponse", "GenerateWordsRequest", "WordsResponse"]
