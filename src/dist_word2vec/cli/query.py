"""Query CLI for Word2Vec embeddings."""

import json
from typing import List, Optional

from dist_word2vec.cli_args import parse_query_args
from dist_word2vec.exceptions import FormatError, NotFoundError
from dist_word2vec.models import EmbeddingModel


def find_similar_words(model: EmbeddingModel, word: str, top_n: int = 10) -> dict:
    """Find words similar to a query word.

    Args:
        model: Loaded embedding model
        word: Query word
        top_n: Number of similar words to return

    Returns:
        Dictionary with query results or error information
    """
    try:
        neighbors = model.find_synonyms(word, top_n)
    except (NotFoundError, ValueError) as e:
        return {"error": str(e)}

    return {"word": word, "neighbors": neighbors}


def main(argv: Optional[List[str]] = None) -> None:
    """Main query function.

    Args:
        argv: Optional command line arguments
    """
    args = parse_query_args(argv)

    try:
        model = EmbeddingModel.load(args.run_dir)
    except (FileNotFoundError, FormatError) as e:
        print(json.dumps({"error": str(e)}))
        return

    result = find_similar_words(model, args.word, args.topn)

    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
