from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Mapping

from openai import OpenAI, OpenAIError

from .chain import Chain
from .errors import InvalidArgumentError, MalformedResponseError, RemoteServiceError

logger = logging.getLogger(__name__)

PromptInput = str | Mapping[str, str]


@dataclass(slots=True)
class CompletionsParameters:
    """Generation options for the legacy completions endpoint.

    Options left as None are omitted from the request so the API default applies.
    """

    model: str = "gpt-3.5-turbo-instruct"
    temperature: float | None = None
    top_p: float | None = None
    n: int | None = None
    max_tokens: int | None = None
    presence_penalty: float | None = None
    frequency_penalty: float | None = None
    stop: list[str] | None = None
    user: str | None = None

    def as_request(self) -> dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass(slots=True)
class ChatCompletionsParameters(CompletionsParameters):
    """Generation options for the chat completions endpoint."""

    model: str = "gpt-3.5-turbo"
    logit_bias: dict[str, int] = field(default_factory=dict)

    def as_request(self) -> dict[str, Any]:
        request = CompletionsParameters.as_request(self)
        if not self.logit_bias:
            request.pop("logit_bias", None)
        return request


def render_prompt(template: str, input: PromptInput) -> str:
    """Substitute template variables into a prompt template.

    Args:
        template: Prompt with ``str.format`` placeholders.
        input: A plain string bound to ``content``, or a mapping of variables.

    Returns:
        The rendered prompt.
    """
    variables = {"content": input} if isinstance(input, str) else dict(input)
    try:
        return template.format_map(variables)
    except KeyError as exc:
        raise InvalidArgumentError(f"missing prompt variable {exc}") from exc
    except (IndexError, ValueError) as exc:
        raise InvalidArgumentError(f"malformed prompt template: {exc}") from exc


class _OpenAiChain(Chain[PromptInput, str]):
    def __init__(self, prompt_template: str, api_key: str | None = None, base_url: str | None = None):
        self.prompt_template = prompt_template
        self.api_key = api_key
        self.base_url = base_url
        self._client: OpenAI | None = None

    @property
    def client(self) -> OpenAI:
        """OpenAI client, created on first use so composing a chain needs no credentials."""
        if self._client is None:
            self._client = OpenAI(api_key=self.api_key, base_url=self.base_url)
        return self._client

    def run(self, input: PromptInput) -> str:
        prompt = render_prompt(self.prompt_template, input)
        try:
            response = self._request(prompt)
        except OpenAIError as exc:
            raise RemoteServiceError(f"OpenAI request failed: {exc}", stage=self.name, cause=exc) from exc

        choices = getattr(response, "choices", None)
        if not choices:
            raise MalformedResponseError("OpenAI response contained no choices", stage=self.name)
        text = self._choice_text(choices[0])
        if text is None:
            raise MalformedResponseError("OpenAI response choice carried no text", stage=self.name)
        return text

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def _request(self, prompt: str):
        raise NotImplementedError

    def _choice_text(self, choice) -> str | None:
        raise NotImplementedError


class OpenAiChatCompletionsChain(_OpenAiChain):
    """Send a rendered prompt to the chat completions endpoint, return the first choice.

    One blocking request per run; there is no retry.
    """

    def __init__(
        self,
        prompt_template: str,
        parameters: ChatCompletionsParameters | None = None,
        api_key: str | None = None,
        base_url: str | None = None,
        system_prompt: str | None = None,
    ):
        super().__init__(prompt_template, api_key=api_key, base_url=base_url)
        self.parameters = parameters or ChatCompletionsParameters()
        self.system_prompt = system_prompt

    def _request(self, prompt: str):
        messages = []
        if self.system_prompt:
            messages.append({"role": "system", "content": self.system_prompt})
        messages.append({"role": "user", "content": prompt})
        logger.debug("chat completion request for model %s", self.parameters.model)
        return self.client.chat.completions.create(messages=messages, **self.parameters.as_request())

    def _choice_text(self, choice) -> str | None:
        message = getattr(choice, "message", None)
        return getattr(message, "content", None)


class OpenAiCompletionsChain(_OpenAiChain):
    """Send a rendered prompt to the legacy completions endpoint."""

    def __init__(
        self,
        prompt_template: str,
        parameters: CompletionsParameters | None = None,
        api_key: str | None = None,
        base_url: str | None = None,
    ):
        super().__init__(prompt_template, api_key=api_key, base_url=base_url)
        self.parameters = parameters or CompletionsParameters()

    def _request(self, prompt: str):
        logger.debug("completion request for model %s", self.parameters.model)
        return self.client.completions.create(prompt=prompt, **self.parameters.as_request())

    def _choice_text(self, choice) -> str | None:
        return getattr(choice, "text", None)
