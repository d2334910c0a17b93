"""Stages of the fetch-cache-fallback summary pipeline.

partition -> build_prompt -> GenerationClient -> merge_generated -> synthesize
"""

from .decoding import BatchSummaries, SingleSummary, decode_response, strip_code_fence
from .fallback import synthesize, synthesize_all
from .generation import GenerationClient, GenerationOutcome, first_success
from .merger import MergeResult, merge_generated
from .partitioner import Partition, partition
from .prompts import build_prompt

__all__ = [  # noqa: RUF022
    # Partitioning
    "Partition",
    "partition",
    # Prompting
    "build_prompt",
    # Generation and decoding
    "GenerationClient",
    "GenerationOutcome",
    "first_success",
    "BatchSummaries",
    "SingleSummary",
    "decode_response",
    "strip_code_fence",
    # Merging and fallback
    "MergeResult",
    "merge_generated",
    "synthesize",
    "synthesize_all",
]
