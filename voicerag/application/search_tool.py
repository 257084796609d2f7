# voicerag/application/search_tool.py
# Boundary between the conversation layer's tool calls and the retrieval engine.

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Sequence, Union

from voicerag.domain.models import ScoredChunk


SUMMARY_LIMIT = 400
DOCUMENT_CONTENT_LIMIT = 2000
TRUNCATION_SUFFIX = "..."

NO_RESULTS_MESSAGE = "No relevant documents found for your query."
NO_ANSWER_MESSAGE = "I don't have any relevant information in my documents to answer that question."

SEARCH_DOCUMENTS_TOOL: Dict[str, Any] = {
    "name": "search_documents",
    "description": (
        "Search through the available documents to find relevant information "
        "to answer user questions. Use this when the user asks about specific "
        "topics, procedures, or information that might be in the documents."
    ),
    "parameters": {
        "type": "object",
        "properties": {
            "query": {
                "type": "string",
                "description": (
                    "The search query to find relevant document chunks. "
                    "Be specific and include key terms."
                ),
            },
            "top_k": {
                "type": "number",
                "description": "Number of most relevant chunks to retrieve (default: 5)",
                "default": 5,
            },
        },
        "required": ["query"],
    },
}


@dataclass(frozen=True)
class SearchSuccess:
    status: ClassVar[str] = "success"

    query: str
    content: str
    sources: List[str] = field(default_factory=list)
    summary: str = ""
    total_results: int = 0

    def to_payload(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "message": f"Found {self.total_results} relevant document chunks for your query.",
            "query": self.query,
            "total_results": self.total_results,
            "document_content": self.content,
            "sources": list(self.sources),
            "summary": self.summary,
        }


@dataclass(frozen=True)
class SearchNoResults:
    status: ClassVar[str] = "no_results"

    query: str

    def to_payload(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "message": NO_RESULTS_MESSAGE,
            "query": self.query,
        }


@dataclass(frozen=True)
class SearchError:
    status: ClassVar[str] = "error"

    message: str

    def to_payload(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "error": "Failed to search documents",
            "message": self.message,
        }


SearchOutcome = Union[SearchSuccess, SearchNoResults, SearchError]


def truncate(text: str, limit: int) -> str:
    return text[:limit] + TRUNCATION_SUFFIX if len(text) > limit else text


def format_results(results: Sequence[ScoredChunk]) -> str:
    return "\n\n".join(
        f"Result {rank} ({result.source}):\n{result.content}"
        for rank, result in enumerate(results, start=1)
    )


def build_outcome(query: str, results: Sequence[ScoredChunk]) -> SearchOutcome:
    if not results:
        return SearchNoResults(query=query)

    formatted = format_results(results)
    return SearchSuccess(
        query=query,
        content=truncate(formatted, DOCUMENT_CONTENT_LIMIT),
        sources=[result.source for result in results],
        summary=truncate(formatted, SUMMARY_LIMIT),
        total_results=len(results),
    )


def format_response_with_sources(results: Sequence[ScoredChunk]) -> Dict[str, Any]:
    """Plain-text answer with numbered citations, for non-tool callers."""
    if not results:
        return {"answer": NO_ANSWER_MESSAGE, "sources": []}

    listing = "\n\n".join(
        f"{rank}. {result.content}\n   Source: {result.source}"
        for rank, result in enumerate(results, start=1)
    )
    return {
        "answer": f"Based on my documents, here's what I found:\n\n{listing}",
        "sources": [
            {"content": r.content, "source": r.source, "relevance": r.relevance}
            for r in results
        ],
    }
