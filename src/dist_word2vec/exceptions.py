"""Error types raised by the Word2Vec pipeline."""


class Word2VecError(Exception):
    """Base class for all Word2Vec errors."""


class ConfigurationError(Word2VecError, ValueError):
    """An option is outside its allowed range."""


class EmptyVocabularyError(Word2VecError):
    """No token reached the minimum count, so there is nothing to train."""


class CapacityExceededError(Word2VecError):
    """vocab_size * vector_size does not fit a signed 32-bit index."""


class NotFoundError(Word2VecError, KeyError):
    """A queried word is not in the trained vocabulary."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable
        return str(self.args[0]) if self.args else ""


class FormatError(Word2VecError):
    """Persisted model metadata does not match what the loader expects."""
