"""Transcript summarization.

Short transcripts go to the text generator in a single prompt. Long ones are
cut into fixed-size chunks, each chunk is summarized with the caller's
instruction, and the partial summaries are merged by one final
consolidation prompt.
"""

from typing import List

from meeting_summarizer.core.llm_client import TextGenerator
from meeting_summarizer.utils.logging import get_logger

LOGGER = get_logger(__name__)

DEFAULT_INSTRUCTION = "Summarize this meeting transcript in a clear and organized manner."
CONSOLIDATION_INSTRUCTION = "Please consolidate these summaries into one coherent summary:"

DEFAULT_CHUNK_THRESHOLD = 30000
DEFAULT_CHUNK_SIZE = 25000


def split_into_chunks(text: str, chunk_size: int) -> List[str]:
    """Cut text into contiguous, non-overlapping pieces of ``chunk_size`` characters."""
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    return [text[i:i + chunk_size] for i in range(0, len(text), chunk_size)]


class SummarizationService:
    """Map-then-reduce summarizer over a single text generator."""

    def __init__(
        self,
        generator: TextGenerator,
        chunk_threshold: int = DEFAULT_CHUNK_THRESHOLD,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        """Initialize the summarizer.

        Args:
            generator: Text generator used for every prompt
            chunk_threshold: Transcripts longer than this are chunked
            chunk_size: Size of each chunk, must be below the threshold
        """
        if chunk_size <= 0 or chunk_size >= chunk_threshold:
            raise ValueError("chunk_size must be positive and smaller than chunk_threshold")

        self.generator = generator
        self.chunk_threshold = chunk_threshold
        self.chunk_size = chunk_size

    async def summarize(self, transcript: str, instruction: str) -> str:
        """Summarize a transcript following the instruction.

        Any generator failure propagates unchanged and nothing is returned,
        so a caller never sees a summary built from part of the transcript.
        """
        if len(transcript) > self.chunk_threshold:
            return await self._summarize_chunked(transcript, instruction)

        LOGGER.info(f"Summarizing transcript in one pass ({len(transcript)} chars)")
        return await self.generator.generate(f"{instruction}\n\nTranscript:\n{transcript}")

    async def _summarize_chunked(self, transcript: str, instruction: str) -> str:
        chunks = split_into_chunks(transcript, self.chunk_size)
        LOGGER.info(
            f"Summarizing transcript in {len(chunks)} chunks "
            f"({len(transcript)} chars, chunk size {self.chunk_size})"
        )

        # One chunk at a time, in transcript order
        partial_summaries: List[str] = []
        for index, chunk in enumerate(chunks, start=1):
            partial = await self.generator.generate(f"{instruction}\n\nTranscript chunk:\n{chunk}")
            partial_summaries.append(partial)
            LOGGER.debug(f"Chunk {index}/{len(chunks)} summarized")

        combined = "\n\n".join(partial_summaries)
        return await self.generator.generate(f"{CONSOLIDATION_INSTRUCTION}\n\n{combined}")
