import json
import logging
from types import SimpleNamespace

import pytest

from casemix.catalog import ReferenceCatalog
from casemix.resolver import CodeResolver, ResolutionError
from mclaim.services.generative_lookup import (
    INA_CBG_SCHEMA,
    OpenAIGenerativeLookup,
    _get_llm_config,
    build_generative_lookup,
)

PAYLOAD = {
    "code": "Z99.9",
    "description": "Dependence on unspecified enabling machine",
    "severity": "II",
    "requiredDocuments": ["SEP", "RESUME MEDIS"],
}


class FakeResponses:
    def __init__(self, *outputs):
        self.outputs = list(outputs)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        output_text = self.outputs[min(len(self.calls), len(self.outputs)) - 1]
        return SimpleNamespace(output_text=output_text)


def _lookup(tmp_path, *outputs):
    cfg = _get_llm_config({"OPENAI_API_KEY": "sk-test", "RESOLVER_CACHE_DIR": str(tmp_path / "cache")})
    responses = FakeResponses(*outputs)
    client = SimpleNamespace(responses=responses)
    return OpenAIGenerativeLookup(cfg, client=client), responses


def test_llm_config_requires_api_key():
    assert _get_llm_config({}) == {}
    assert _get_llm_config({"OPENAI_API_KEY": "sk-test", "RESOLVER_LLM_PROVIDER": "gemini"}) == {}
    assert build_generative_lookup({"OPENAI_API_KEY": None}, logging.getLogger("test")) is None


def test_build_lookup_with_key(tmp_path):
    lookup = build_generative_lookup({"OPENAI_API_KEY": "sk-test", "RESOLVER_CACHE_DIR": str(tmp_path)})

    assert isinstance(lookup, OpenAIGenerativeLookup)
    assert lookup.cfg["model"] == "gpt-4o-mini"


def test_generate_requests_strict_schema(tmp_path):
    lookup, responses = _lookup(tmp_path, json.dumps(PAYLOAD))

    result = lookup.generate("Z99.9", "pasien ventilator")

    assert result == PAYLOAD
    request = responses.calls[0]
    assert request["text"]["format"]["strict"] is True
    assert request["text"]["format"]["schema"] is INA_CBG_SCHEMA
    assert 'INA-CBG code: "Z99.9"' in request["input"][1]["content"]
    assert "pasien ventilator" in request["input"][1]["content"]


def test_generate_uses_cache(tmp_path):
    lookup, responses = _lookup(tmp_path, json.dumps(PAYLOAD))

    lookup.generate("Z99.9", None)
    lookup.generate("Z99.9", None)
    lookup.generate("Z99.9", "konteks lain")

    assert len(responses.calls) == 2
    assert len(list((tmp_path / "cache").glob("*.json"))) == 2


@pytest.mark.parametrize("output_text", ["", "bukan json"])
def test_generate_rejects_unusable_output(tmp_path, output_text):
    lookup, _ = _lookup(tmp_path, output_text)

    with pytest.raises(ResolutionError):
        lookup.generate("Z99.9", None)


def test_rejected_answer_is_not_cached(tmp_path):
    bad = json.dumps({**PAYLOAD, "requiredDocuments": []})
    lookup, responses = _lookup(tmp_path, bad, json.dumps(PAYLOAD))
    resolver = CodeResolver(ReferenceCatalog(), lookup)

    with pytest.raises(ResolutionError):
        resolver.resolve("Z99.9")
    assert list((tmp_path / "cache").glob("*.json")) == []

    resolution = resolver.resolve("Z99.9")

    assert resolution.required_documents == ("SEP", "RESUME MEDIS")
    assert len(responses.calls) == 2


def test_invalid_cache_entry_is_discarded(tmp_path):
    lookup, responses = _lookup(tmp_path, json.dumps(PAYLOAD))
    cache_file = lookup._cache_file("Z99.9", None)
    cache_file.write_text(json.dumps({"result": {**PAYLOAD, "severity": "IV"}}))

    result = lookup.generate("Z99.9", None)

    assert result == PAYLOAD
    assert len(responses.calls) == 1
    assert json.loads(cache_file.read_text())["result"] == PAYLOAD


def test_schema_requires_at_least_one_document():
    assert INA_CBG_SCHEMA["properties"]["requiredDocuments"]["minItems"] == 1
