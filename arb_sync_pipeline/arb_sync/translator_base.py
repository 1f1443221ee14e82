from abc import ABC, abstractmethod
from typing import List

class Translator(ABC):
    @abstractmethod
    def translate(self, from_locale: str, to_locale: str, texts: List[str]) -> List[str]:
        """
        Translate `texts` in order. Raises RateLimited when the provider throttles
        and OracleFailure for anything else that is not a usable answer.
        """
        ...
