import httpx
import openai

from contractguard.semantic.client_base import BaseSemanticClient
from contractguard.semantic.exceptions import (
    AnalyzerUnavailableError,
    AuthenticationFailedError,
    ExternalAnalyzerError,
    ExternalAnalyzerTimeoutError,
    MalformedResponseError,
    QuotaExceededError,
    RateLimitedError,
    RequestRejectedError,
)

_QUOTA_ERROR_CODE = "insufficient_quota"
_RESPONSE_FORMAT_NAME = "risk_findings"


class OpenAIClientAdapter(BaseSemanticClient):
    """Chat-completions client for OpenAI and OpenAI-compatible endpoints.

    SDK retries are disabled: one call is one request, and the orchestrator
    owns the time budget.
    """

    provider_name = "openai"

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=0,
        )

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        json_schema: dict[str, object],
    ) -> str:
        try:
            response = self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": _RESPONSE_FORMAT_NAME,
                        "strict": True,
                        "schema": json_schema,
                    },
                },
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
            )
        except (openai.APITimeoutError, httpx.TimeoutException) as exc:
            raise ExternalAnalyzerTimeoutError(f"AI provider timeout: {exc}") from exc
        except (openai.APIConnectionError, httpx.ConnectError) as exc:
            raise AnalyzerUnavailableError(f"AI provider network error: {exc}") from exc
        except openai.APIStatusError as exc:
            raise _status_error(exc) from exc
        except openai.APIError as exc:
            raise AnalyzerUnavailableError(f"AI provider API error: {exc}") from exc

        return _reply_text(response)


def _status_error(exc: openai.APIStatusError) -> ExternalAnalyzerError:
    """Map an HTTP error answer from the provider to the analyzer error it stands for."""
    if isinstance(exc, openai.RateLimitError):
        if exc.code == _QUOTA_ERROR_CODE or "quota" in str(exc).lower():
            return QuotaExceededError(f"AI provider quota error: {exc}")
        return RateLimitedError(f"AI provider rate limit: {exc}")
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return AuthenticationFailedError(f"AI provider rejected credentials: {exc}")
    if isinstance(exc, (openai.BadRequestError, openai.UnprocessableEntityError)):
        return RequestRejectedError(f"AI provider refused the request: {exc}")
    return AnalyzerUnavailableError(f"AI provider API error: {exc}")


def _reply_text(response: object) -> str:
    choices = getattr(response, "choices", None)
    if not choices:
        raise MalformedResponseError("AI returned no choices")
    content = choices[0].message.content
    if content is None:
        raise MalformedResponseError("AI returned empty response")
    return content
