# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Text generation backends.

The runner only knows one operation: generate(prompt) -> text. Anything
that can answer a prompt plugs in behind the TextGenerator interface:

  - OpenAIGenerator: the live service, through the OpenAI Responses API
  - PrecomputedGenerator: replays sample outputs captured earlier, so a
    stored set of responses can be re-scored without any network traffic

The live service is slow, rate limited and gives different answers to the
same prompt, so tests always use a fake generator instead of this module's
network path.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import openai
from dotenv import load_dotenv
from openai import OpenAI

from archbench.evaluation.benchmarks.models import Task, Variant
from archbench.evaluation.exceptions import GenerationError
from archbench.evaluation.tasks.builder import build_prompt
from archbench.logging.logger import get_logger

logger = get_logger(__name__)


class TextGenerator(ABC):
    """
    Base class for everything that turns a prompt into generated text.

    Contract:
        generate(prompt) -> text, or raise GenerationError

    Implementations may block. They must not retry silently: a failure is
    reported to the runner, which records it on the trial.
    """

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """
        Produce a response for one prompt.

        Raises:
            GenerationError: If no usable text came back.
        """
        ...

    def for_task(self, task: Task) -> "TextGenerator":
        """Generator to use for one task's trials. Defaults to self."""
        return self


def load_environment(env_file: Optional[Path]) -> None:
    """Load an .env file into os.environ if one exists. Existing variables win."""
    if env_file is not None and env_file.is_file():
        load_dotenv(env_file, override=False)
        logger.debug("Loaded environment variables", extra={"env_file": str(env_file)})


@lru_cache(maxsize=4)
def get_llm_client(timeout_seconds: float) -> OpenAI:
    """
    Return a shared OpenAI client for the given timeout.

    The client reads OPENAI_API_KEY from the environment, so call
    load_environment() first when the key lives in an .env file.
    """
    return OpenAI(timeout=timeout_seconds, max_retries=0)


class OpenAIGenerator(TextGenerator):
    """Generates text with the OpenAI Responses API."""

    def __init__(
        self,
        model: str,
        max_output_tokens: int = 2000,
        timeout_seconds: float = 60.0,
        **request_kwargs: Any,
    ) -> None:
        self.model = model
        self.max_output_tokens = max_output_tokens
        self.timeout_seconds = timeout_seconds
        self._request_kwargs = request_kwargs

    def generate(self, prompt: str) -> str:
        logger.debug(
            "Calling responses.create",
            extra={"model": self.model, "max_output_tokens": self.max_output_tokens},
        )
        try:
            client = get_llm_client(self.timeout_seconds)
            response = client.responses.create(
                model=self.model,
                input=prompt,
                max_output_tokens=self.max_output_tokens,
                **self._request_kwargs,
            )
        except openai.OpenAIError as err:
            raise GenerationError(f"{type(err).__name__}: {err}") from err

        text = response.output_text
        if not text:
            raise GenerationError(f"Empty response from model {self.model}")
        return text


class PrecomputedGenerator(TextGenerator):
    """
    Serves stored outputs instead of calling a model.

    Each task's baseline and enhanced prompts are rebuilt with the same
    builder the runner uses and mapped to the stored text, so the runner
    goes through exactly the same path it takes for a live run. Lookups go
    through for_task(), keyed by task id: two samples with the same task
    text build the same prompt and must still get their own outputs.
    """

    def __init__(self, tasks: Sequence[Task], samples: dict[str, dict[Variant, str]]) -> None:
        self._by_task: dict[str, dict[str, str]] = {}
        self._responses: dict[str, str] = {}
        self._ambiguous: set[str] = set()
        for task in tasks:
            stored = {
                build_prompt(task, variant): text
                for variant, text in samples.get(task.id, {}).items()
            }
            self._by_task[task.id] = stored
            for prompt, text in stored.items():
                if prompt in self._responses and self._responses[prompt] != text:
                    self._ambiguous.add(prompt)
                self._responses[prompt] = text

    def for_task(self, task: Task) -> TextGenerator:
        return _StoredResponses(self._by_task.get(task.id, {}))

    def generate(self, prompt: str) -> str:
        if prompt in self._ambiguous:
            raise GenerationError("Several samples share this prompt with different outputs")
        if prompt not in self._responses:
            raise GenerationError("No precomputed sample matches this prompt")
        return self._responses[prompt]


class _StoredResponses(TextGenerator):
    """One task's stored outputs, keyed by prompt."""

    def __init__(self, responses: dict[str, str]) -> None:
        self._responses = responses

    def generate(self, prompt: str) -> str:
        if prompt not in self._responses:
            raise GenerationError("No precomputed sample matches this prompt")
        return self._responses[prompt]
