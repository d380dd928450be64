from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from openai import OpenAI

from casemix.resolver import ResolutionError, validate_generated

PROMPT_VERSION = "v1"

INA_CBG_SCHEMA = {
    "type": "object",
    "properties": {
        "code": {"type": "string", "description": "Official INA-CBG / ICD-10 code"},
        "description": {"type": "string", "description": "Detailed medical description"},
        "severity": {"type": "string", "enum": ["I", "II", "III"]},
        "requiredDocuments": {
            "type": "array",
            "items": {"type": "string"},
            "minItems": 1,
            "description": "Mandatory claim documents",
        },
    },
    "required": ["code", "description", "severity", "requiredDocuments"],
    "additionalProperties": False,
}

SYSTEM_PROMPT = (
    "Anda adalah verifikator klaim INA-CBG BPJS Kesehatan di rumah sakit kelas D. "
    "Untuk kode diagnosis yang diberikan, tentukan deskripsi medis resmi, tingkat severity (I, II, III) "
    "dan daftar berkas wajib untuk pengajuan klaim (mis. SEP, TRIAGE, resume medis, hasil penunjang). "
    "Jawab hanya sesuai schema."
)


def _slugify(value: str) -> str:
    return "".join(ch if ch.isalnum() or ch in ("-", "_") else "_" for ch in value)


def _get_llm_config(config: Mapping[str, Any]) -> dict[str, Any]:
    provider = (config.get("RESOLVER_LLM_PROVIDER") or "openai").lower()
    api_key = config.get("OPENAI_API_KEY")
    if provider != "openai" or not api_key:
        return {}

    cache_setting = config.get("RESOLVER_CACHE_DIR")
    cache_dir = Path(cache_setting) if cache_setting else None
    if cache_dir is not None:
        cache_dir.mkdir(parents=True, exist_ok=True)

    return {
        "provider": provider,
        "api_key": api_key,
        "model": config.get("RESOLVER_LLM_MODEL", "gpt-4o-mini"),
        "temperature": float(config.get("RESOLVER_LLM_TEMPERATURE", 0.1)),
        "max_tokens": int(config.get("RESOLVER_LLM_MAX_TOKENS", 600)),
        "timeout": float(config.get("RESOLVER_LLM_TIMEOUT_SECONDS", 30)),
        "cache_dir": cache_dir,
    }


class OpenAIGenerativeLookup:
    """Ask an OpenAI model for the INA-CBG description, severity and document list of a code."""

    def __init__(self, cfg: dict[str, Any], logger: logging.Logger | None = None, client: Any = None) -> None:
        self.cfg = cfg
        self.logger = logger or logging.getLogger(__name__)
        # no automatic retry; the verifier resubmits
        self.client = client or OpenAI(api_key=cfg["api_key"], timeout=cfg["timeout"], max_retries=0)

    def _cache_file(self, code: str, hint: str | None) -> Path | None:
        cache_dir = self.cfg.get("cache_dir")
        if cache_dir is None:
            return None
        hint_digest = hashlib.sha256((hint or "").strip().encode("utf-8")).hexdigest()[:12]
        return cache_dir / f"{_slugify(code)}_{hint_digest}_{_slugify(self.cfg['model'])}_{PROMPT_VERSION}.json"

    def _read_cache(self, cache_file: Path | None) -> dict[str, Any] | None:
        if cache_file is None or not cache_file.exists():
            return None
        try:
            cached = json.loads(cache_file.read_text())
            validate_generated(cached["result"])
            return cached["result"]
        except (ValueError, KeyError, ResolutionError) as exc:
            self.logger.warning("Cache lookup rusak %s: %s", cache_file.name, exc)
            cache_file.unlink(missing_ok=True)
            return None

    def generate(self, code: str, hint: str | None) -> dict[str, Any]:
        cache_file = self._cache_file(code, hint)
        cached = self._read_cache(cache_file)
        if cached is not None:
            self.logger.info("Hasil lookup %s diambil dari cache", code)
            return cached

        user_prompt = f'Determine requirements for INA-CBG code: "{code}".'
        if hint and hint.strip():
            user_prompt += f"\nKonteks klinis dari verifikator: {hint.strip()}"

        response = self.client.responses.create(
            model=self.cfg["model"],
            input=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": user_prompt},
            ],
            temperature=self.cfg["temperature"],
            max_output_tokens=self.cfg["max_tokens"],
            text={
                "format": {
                    "type": "json_schema",
                    "name": "ina_cbg_resolution",
                    "schema": INA_CBG_SCHEMA,
                    "strict": True,
                }
            },
        )
        output_text = getattr(response, "output_text", None)
        if not output_text:
            raise ResolutionError("Layanan AI tidak mengembalikan konten")
        try:
            result = json.loads(output_text)
        except ValueError as exc:
            raise ResolutionError("Respons AI bukan JSON yang valid") from exc
        # cache only validated answers
        validate_generated(result)

        if cache_file is not None:
            cache_file.write_text(
                json.dumps(
                    {
                        "result": result,
                        "model": self.cfg["model"],
                        "generated_at": datetime.now(tz=timezone.utc).isoformat(),
                        "prompt_version": PROMPT_VERSION,
                    },
                    ensure_ascii=False,
                    indent=2,
                )
            )
        return result


def build_generative_lookup(config: Mapping[str, Any], logger: logging.Logger | None = None) -> OpenAIGenerativeLookup | None:
    """Return the configured lookup, or None when no provider/API key is set."""
    cfg = _get_llm_config(config)
    if not cfg:
        if logger is not None:
            logger.info("Generative lookup tidak aktif (OPENAI_API_KEY kosong)")
        return None
    return OpenAIGenerativeLookup(cfg, logger=logger)
