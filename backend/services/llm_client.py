"""LLM Client for Groq API integration."""
import time
from dataclasses import dataclass
from typing import Optional, Dict, Any, NoReturn
from groq import Groq
from groq import RateLimitError, AuthenticationError, APIError, APITimeoutError
import logging

from config import GROQ_API_KEY, CHAT_MODEL, LLM_MAX_TOKENS

logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Response from LLM generation."""
    text: str
    tokens_input: int
    tokens_output: int
    latency_ms: int
    model_used: str


@dataclass
class LLMError:
    """Structured error response from LLM operations."""
    code: str
    message: str
    details: Dict[str, Any]


class LLMClientError(Exception):
    """Custom exception for LLM client errors with structured error information."""

    def __init__(self, error: LLMError):
        self.error = error
        super().__init__(error.message)


class LLMClient:
    """Client for generating study answers through the Groq API."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        """
        Initialize LLM client with Groq API key.

        Args:
            api_key: Groq API key (defaults to GROQ_API_KEY from environment)
            model: Default model name (defaults to CHAT_MODEL)
        """
        self.api_key = api_key or GROQ_API_KEY
        if not self.api_key:
            raise ValueError("GROQ_API_KEY must be provided or set in environment")

        self.model = model or CHAT_MODEL
        self.client = Groq(api_key=self.api_key)
        logger.info(f"LLMClient initialized with model {self.model}")

    def generate(
        self,
        prompt: str,
        model: Optional[str] = None,
        max_tokens: int = LLM_MAX_TOKENS,
        temperature: float = 0.3
    ) -> LLMResponse:
        """
        Generate a completion for a fully assembled prompt.

        Args:
            prompt: Prompt with context and instructions
            model: Model override for this call
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature

        Returns:
            LLMResponse with text, token counts, and latency

        Raises:
            LLMClientError: Structured error with code, message, and details
        """
        model = model or self.model
        start_time = time.time()

        try:
            logger.debug(f"Generating response with model: {model}")
            response = self.client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=max_tokens,
                temperature=temperature
            )
        except RateLimitError as e:
            self._fail(
                "RATE_LIMIT_ERROR",
                "Rate limit exceeded. Please try again in a few moments.",
                model, start_time, e, retry_after=60
            )
        except AuthenticationError as e:
            self._fail("AUTHENTICATION_ERROR", "Authentication failed. Please check your API key.", model, start_time, e)
        except APITimeoutError as e:
            self._fail("TIMEOUT_ERROR", "Request timed out. Please try again.", model, start_time, e)
        except APIError as e:
            self._fail("API_ERROR", f"Groq API error: {str(e)}", model, start_time, e)
        except Exception as e:
            self._fail(
                "UNKNOWN_ERROR",
                f"Unexpected error during generation: {str(e)}",
                model, start_time, e, error_type=type(e).__name__
            )

        latency_ms = int((time.time() - start_time) * 1000)
        text = response.choices[0].message.content or ""
        tokens_input = response.usage.prompt_tokens
        tokens_output = response.usage.completion_tokens

        logger.info(
            f"Generated response: model={model}, "
            f"input_tokens={tokens_input}, output_tokens={tokens_output}, "
            f"latency={latency_ms}ms"
        )

        return LLMResponse(
            text=text.strip(),
            tokens_input=tokens_input,
            tokens_output=tokens_output,
            latency_ms=latency_ms,
            model_used=model
        )

    @staticmethod
    def _fail(code: str, message: str, model: str, start_time: float, cause: Exception, **extra) -> NoReturn:
        latency_ms = int((time.time() - start_time) * 1000)
        error = LLMError(
            code=code,
            message=message,
            details={
                "model": model,
                "latency_ms": latency_ms,
                "original_error": str(cause),
                **extra
            }
        )
        logger.error(
            f"{code}: model={model}, latency={latency_ms}ms, error={cause}",
            exc_info=True,
            extra={"error_code": error.code, "error_details": error.details}
        )
        raise LLMClientError(error) from cause
