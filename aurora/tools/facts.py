"""Numeric and factual lookups with a web search fallback."""

from __future__ import annotations

import logging

import httpx

from aurora.config import settings
from aurora.errors import ToolError
from aurora.tools.base import NO_SPECIFIC_ANSWER, FactCapability, SearchCapability
from aurora.tools.search import web_search

logger = logging.getLogger(__name__)

WOLFRAM_SHORT_ANSWER_URL = "https://api.wolframalpha.com/v1/result"

# Static vocabulary of factual-question prefixes routed to the fact engine.
FACT_KEYWORDS: tuple[str, ...] = (
    "what is the capital of", "value of pi", "speed of light", "population of earth",
    "who invented", "square root of", "distance from", "atomic number of", "gdp of",
    "average temperature of", "how many planets", "tallest mountain", "largest ocean",
    "prime numbers", "chemical formula for water", "gravitational constant",
    "what is a black hole", "photosynthesis equation", "speed of sound",
    "what is quantum computing", "who is albert einstein", "what is blockchain",
    "what is artificial intelligence", "what is machine learning", "what is deep learning",
    "what is neural network", "what is natural language processing",
    "what is computer vision", "what is reinforcement learning",
    "what is supervised learning", "what is unsupervised learning", "what is a dataset",
    "what is a model in machine learning", "what is overfitting", "what is underfitting",
    "what is a feature in machine learning", "what is a label in machine learning",
    "what is a hyperparameter", "what is a loss function", "what is gradient descent",
    "what is backpropagation", "what is a convolutional neural network",
    "what is a recurrent neural network", "what is an autoencoder",
    "what is generative adversarial network", "what is transfer learning",
    "what is active learning", "what is ensemble learning", "what is boosting",
    "what is bagging", "what is random forest", "what is decision tree",
    "what is support vector machine", "what is k-nearest neighbors",
    "what is k-means clustering", "what is principal component analysis",
    "what is dimensionality reduction", "what is a perceptron", "what is a sigmoid function",
    "what is relu", "what is softmax", "what is cross-entropy", "what is regularization",
    "what is dropout", "what is batch normalization", "what is learning rate",
    "what is epoch", "what is batch size", "what is iteration", "what is a tensor",
    "what is tensorflow", "what is pytorch", "what is scikit-learn", "what is pandas",
    "what is numpy", "what is matplotlib", "what is seaborn", "what is jupyter notebook",
    "what is google colab", "what is kaggle", "what is a virtual environment", "what is pip",
    "what is an api", "what is json", "what is xml", "what is http", "what is rest api",
    "what is graphql", "what is docker", "what is kubernetes", "what is cloud computing",
    "what is aws", "what is azure", "what is google cloud platform",
    "what is serverless computing", "what is microservices", "what is ci/cd", "what is git",
    "what is github", "what is agile methodology", "what is scrum", "what is kanban",
    "what is a database", "what is sql", "what is nosql", "what is a relational database",
    "what is a document database", "what is a graph database",
    "what is a time series database", "what is a data warehouse", "what is data lake",
    "what is etl", "what is data mining", "what is data science", "what is big data",
    "what is data visualization", "what is a dashboard", "what is business intelligence",
    "what is a data analyst", "what is a data engineer", "what is a machine learning engineer",
    "what is a data scientist", "what is a prompt engineer", "what is a large language model",
    "what is generative ai", "what is a transformer model", "what is attention mechanism",
    "what is tokenization", "what is embedding", "what is fine-tuning",
    "what is zero-shot learning", "what is few-shot learning", "what is prompt engineering",
    "what is a conversational ai", "what is a chatbot", "what is a virtual assistant",
    "what is speech recognition", "what is text-to-speech", "what is sentiment analysis",
    "what is entity recognition", "what is text summarization", "what is machine translation",
    "what is question answering", "what is knowledge graph", "what is semantic search",
    "what is a vector database", "what is rag", "what is hallucination in ai",
    "what is bias in ai", "what is explainable ai", "what is ethical ai", "what is ai safety",
    "what is singularity in ai", "what is general ai", "what is narrow ai",
    "what is superintelligence", "what is the turing test",
)


def is_fact_query(lowered: str) -> bool:
    return any(keyword in lowered for keyword in FACT_KEYWORDS)


class WolframAlpha:
    """Wolfram|Alpha Short Answers API. HTTP 501 means "no short answer"."""

    def __init__(self, app_id: str) -> None:
        self._app_id = app_id

    async def query(self, text: str) -> str:
        try:
            async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
                resp = await client.get(
                    WOLFRAM_SHORT_ANSWER_URL, params={"appid": self._app_id, "i": text}
                )
        except httpx.HTTPError as exc:
            raise ToolError(f"Wolfram|Alpha request failed: {exc}") from exc

        if resp.status_code == 501:
            return NO_SPECIFIC_ANSWER
        if resp.status_code != 200:
            raise ToolError(f"Wolfram|Alpha returned {resp.status_code}: {resp.text[:200]}")
        return resp.text.strip() or NO_SPECIFIC_ANSWER


async def lookup_fact(
    query: str,
    capability: FactCapability,
    search_capability: SearchCapability | None = None,
) -> str:
    """Ask the fact engine, falling back to a Google search.

    A ``NO_SPECIFIC_ANSWER`` reply falls back silently; an exception falls
    back with a note about the fact engine error.
    """
    logger.info('Querying fact engine for "%s"', query)
    try:
        answer = await capability.query(query)
    except Exception as exc:
        logger.exception("Fact engine failed: %s. Falling back to general search.", exc)
        found = await web_search(query, "google", search_capability)
        return f"I encountered an error with the fact engine, but here's what I found: {found}"

    if answer == NO_SPECIFIC_ANSWER:
        logger.info('No specific fact answer for "%s"; falling back to Google', query)
        return await web_search(query, "google", search_capability)

    logger.info('Fact engine answered "%s"', query)
    return answer
