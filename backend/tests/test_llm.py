import asyncio
from types import SimpleNamespace

import pytest

from rotaexpress.services.llm import QueryNormalizer


class _FakeLLM:
    def __init__(self, content=None, error=None, delay=0.0):
        self.content = content
        self.error = error
        self.delay = delay
        self.messages = []

    async def ainvoke(self, messages):
        self.messages.append(messages)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return SimpleNamespace(content=self.content)


def _normalizer(llm):
    normalizer = QueryNormalizer()
    normalizer.llm = llm
    return normalizer


@pytest.mark.asyncio
async def test_normalize_returns_model_output():
    llm = _FakeLLM(content=' "Praça da Sé, São Paulo, SP" \n')

    result = await _normalizer(llm).normalize("rua do centro em sp perto da sé")

    assert result == "Praça da Sé, São Paulo, SP"
    assert "rua do centro em sp perto da sé" in llm.messages[0][-1].content


@pytest.mark.asyncio
async def test_normalize_falls_back_on_model_error():
    llm = _FakeLLM(error=RuntimeError("quota exceeded"))

    assert await _normalizer(llm).normalize("farmacia central") == "farmacia central"


@pytest.mark.asyncio
async def test_normalize_falls_back_on_timeout():
    normalizer = _normalizer(_FakeLLM(content="late", delay=0.2))
    normalizer.settings = normalizer.settings.model_copy(update={"llm_timeout": 0.01})

    assert await normalizer.normalize("farmacia central") == "farmacia central"


@pytest.mark.asyncio
async def test_normalize_falls_back_on_empty_output():
    assert await _normalizer(_FakeLLM(content="  ")).normalize("sé") == "sé"


@pytest.mark.asyncio
async def test_postal_codes_and_blank_queries_skip_the_model():
    llm = _FakeLLM(content="should not be used")
    normalizer = _normalizer(llm)

    assert await normalizer.normalize("01310-000") == "01310-000"
    assert await normalizer.normalize("   ") == "   "
    assert llm.messages == []


@pytest.mark.asyncio
async def test_missing_model_returns_query():
    assert await _normalizer(None).normalize("oficina do giba") == "oficina do giba"
