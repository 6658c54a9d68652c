from __future__ import annotations

import asyncio

from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_ollama import ChatOllama
from langchain_openai import ChatOpenAI

from rotaexpress.core.config import get_settings
from rotaexpress.core.logging import get_logger
from rotaexpress.domain.query import is_postal_code

_logger = get_logger(__name__)

_SYSTEM_PROMPT = (
    "Você é um especialista em logística brasileira. Transforme a consulta de "
    "endereço, local ou nome de cliente recebida em uma string de busca "
    "otimizada para o motor Nominatim (OSM). "
    'Exemplo: "Rua do centro em SP perto da sé" -> "Praça da Sé, São Paulo, SP". '
    "Retorne APENAS a string otimizada, sem explicações."
)


class QueryNormalizer:
    """Rewrites free-form queries into geocoder friendly strings via an LLM."""

    def __init__(self) -> None:
        self.settings = get_settings()
        self.initialization_error: str | None = None
        self.llm = self._initialize_llm()

    def _initialize_llm(self) -> BaseChatModel | None:
        provider = self.settings.llm_provider
        model = self.settings.llm_model
        temperature = 0

        try:
            if provider == "openai":
                api_key = self.settings.openai_api_key
                if not api_key:
                    self.initialization_error = (
                        "OpenAI API key not found. Please set ROTAEXPRESS_OPENAI_API_KEY."
                    )
                    _logger.warning(self.initialization_error)
                    return None
                return ChatOpenAI(model=model, api_key=api_key, temperature=temperature)

            elif provider == "anthropic":
                api_key = self.settings.anthropic_api_key
                if not api_key:
                    self.initialization_error = "Anthropic API key not found. Please set ROTAEXPRESS_ANTHROPIC_API_KEY."
                    _logger.warning(self.initialization_error)
                    return None
                return ChatAnthropic(
                    model=model, api_key=api_key, temperature=temperature
                )

            elif provider == "google":
                api_key = self.settings.google_api_key
                if not api_key:
                    self.initialization_error = (
                        "Google API key not found. Please set ROTAEXPRESS_GOOGLE_API_KEY."
                    )
                    _logger.warning(self.initialization_error)
                    return None
                return ChatGoogleGenerativeAI(
                    model=model,
                    google_api_key=api_key,
                    temperature=temperature,
                )

            elif provider == "xai":
                api_key = self.settings.xai_api_key
                if not api_key:
                    self.initialization_error = (
                        "xAI API key not found. Please set ROTAEXPRESS_XAI_API_KEY."
                    )
                    _logger.warning(self.initialization_error)
                    return None
                return ChatOpenAI(
                    model=model,
                    api_key=api_key,
                    base_url="https://api.x.ai/v1",
                    temperature=temperature,
                )

            elif provider == "local":
                return ChatOllama(
                    model=model,
                    base_url=self.settings.llm_base_url,
                    temperature=temperature,
                )

            else:
                self.initialization_error = f"Unsupported LLM provider: {provider}"
                _logger.error(self.initialization_error)
                return None

        except Exception as e:
            self.initialization_error = f"Failed to initialize LLM: {str(e)}"
            _logger.error(self.initialization_error)
            return None

    async def normalize(self, query: str) -> str:
        """
        Return an optimized search string for ``query``.

        Never raises: blank input, postal codes, a missing model, model
        errors and timeouts all hand back the original query.
        """
        if not query or not query.strip() or is_postal_code(query):
            return query

        if not self.llm:
            _logger.debug(
                "Query normalization skipped", reason=self.initialization_error
            )
            return query

        try:
            response = await asyncio.wait_for(
                self.llm.ainvoke(
                    [
                        SystemMessage(content=_SYSTEM_PROMPT),
                        HumanMessage(content=f'Consulta: "{query}"'),
                    ]
                ),
                timeout=self.settings.llm_timeout,
            )
        except asyncio.TimeoutError:
            _logger.warning("Query normalization timed out", query=query)
            return query
        except Exception as e:
            _logger.warning("Query normalization failed", query=query, error=str(e))
            return query

        content = getattr(response, "content", None)
        optimized = content.strip().strip('"').strip() if isinstance(content, str) else ""
        if not optimized:
            return query

        _logger.info("Query normalized", query=query, optimized=optimized)
        return optimized


_normalizer: QueryNormalizer | None = None


def get_query_normalizer() -> QueryNormalizer:
    global _normalizer
    if _normalizer is None:
        _normalizer = QueryNormalizer()
    return _normalizer


async def normalize_query(query: str) -> str:
    return await get_query_normalizer().normalize(query)
