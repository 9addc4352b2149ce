"""
Unified LLM client with fallback support.
Priority: Gemini (REST) → Ollama (local).
Every failure is raised as a GenerationError carrying an ErrorCategory.
"""

import json
from typing import Any, Dict, List, Optional, Tuple

import httpx
import ollama
import requests

from story_automation import config
from story_automation.domain.errors import ErrorCategory, GenerationError, category_for_status
from story_automation.ports.interfaces import ITextGenerator


def extract_json_object(content: str) -> Dict[str, Any]:
    """Parse a JSON object out of an LLM response (tolerates ```json fences and chatter)."""
    content = (content or "").strip()
    if "```json" in content:
        content = content.split("```json")[1].split("```")[0]
    elif "```" in content:
        content = content.split("```")[1].split("```")[0]

    try:
        data = json.loads(content.strip())
    except json.JSONDecodeError as e:
        start_idx = content.find("{")
        end_idx = content.rfind("}") + 1
        if start_idx == -1 or end_idx <= start_idx:
            raise GenerationError(f"No JSON found in response: {e}", ErrorCategory.MALFORMED)
        try:
            data = json.loads(content[start_idx:end_idx])
        except json.JSONDecodeError as e2:
            raise GenerationError(f"Could not parse JSON from response: {e2}", ErrorCategory.MALFORMED)

    if not isinstance(data, dict):
        raise GenerationError(
            f"Expected a JSON object, got {type(data).__name__}", ErrorCategory.MALFORMED
        )
    return data


class LLMClient(ITextGenerator):
    """Unified LLM client with fallback support"""

    def __init__(
        self,
        gemini_api_key: Optional[str] = None,
        use_ollama_fallback: bool = config.USE_OLLAMA_FALLBACK,
        timeout: int = config.LLM_TIMEOUT,
    ):
        self.timeout = timeout

        # Priority 1: Gemini (set GEMINI_API_KEY in .env)
        self.gemini_config = {
            "model": config.GEMINI_MODEL,
            "temperature": config.LLM_TEMPERATURE,
            "api_key": gemini_api_key if gemini_api_key is not None else config.GEMINI_API_KEY,
            "base_url": config.GEMINI_BASE_URL,
        }

        # Priority 2: Ollama (fallback; local)
        self.ollama_config = {
            "base_url": config.OLLAMA_BASE_URL,
            "model": config.OLLAMA_MODEL,
        }

        self.providers: List[str] = []
        if (self.gemini_config["api_key"] or "").strip():
            self.providers.append("gemini")
        if use_ollama_fallback:
            self.providers.append("ollama")

    def generate(self, prompt: str, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Generate using the first provider that succeeds.
        Returns: {"response": str, "provider": str, "tokens": int}
        Raises the primary provider's GenerationError when every provider fails.
        """
        if options is None:
            options = {}
        if not self.providers:
            raise GenerationError(
                "No LLM providers configured (set GEMINI_API_KEY or enable Ollama)",
                ErrorCategory.UNAVAILABLE,
            )

        first_error: Optional[GenerationError] = None
        for provider in self.providers:
            try:
                if provider == "gemini":
                    return self._generate_gemini(prompt, options)
                return self._generate_ollama(prompt, options)
            except GenerationError as e:
                print(f"  ⚠️  {provider} failed ({e.category.value}): {e}")
                if first_error is None:
                    first_error = e
        raise first_error

    def generate_json(
        self,
        prompt: str,
        schema: Optional[Dict[str, Any]] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Dict[str, Any], int]:
        opts = dict(options or {})
        opts["json"] = True
        if schema is not None:
            opts["schema"] = schema
        result = self.generate(prompt, opts)
        return extract_json_object(result.get("response", "")), result.get("tokens", 0)

    def _generate_gemini(self, prompt: str, options: Dict[str, Any]) -> Dict[str, Any]:
        """Generate using the Gemini REST API"""
        url = f"{self.gemini_config['base_url']}/{self.gemini_config['model']}:generateContent"
        generation_config: Dict[str, Any] = {
            "temperature": options.get("temperature", self.gemini_config["temperature"]),
            "maxOutputTokens": min(options.get("num_predict", 8192), 16384),
        }
        if options.get("json"):
            generation_config["responseMimeType"] = "application/json"
            if options.get("schema"):
                generation_config["responseSchema"] = options["schema"]

        data: Dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }
        if options.get("system_instruction"):
            data["systemInstruction"] = {"parts": [{"text": options["system_instruction"]}]}

        headers = {
            "x-goog-api-key": self.gemini_config["api_key"],
            "Content-Type": "application/json",
        }
        try:
            response = requests.post(url, headers=headers, json=data, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise GenerationError(
                f"Gemini request timed out after {self.timeout}s: {e}", ErrorCategory.TRANSPORT
            )
        except requests.exceptions.RequestException as e:
            raise GenerationError(f"Gemini transport error: {e}", ErrorCategory.TRANSPORT)

        if response.status_code != 200:
            error_text = response.text[:500] if response.text else ""
            raise GenerationError(
                f"Gemini API returned status {response.status_code}: {error_text}",
                category_for_status(response.status_code),
                status_code=response.status_code,
            )

        try:
            result = response.json()
        except ValueError as e:
            raise GenerationError(f"Gemini returned non-JSON body: {e}", ErrorCategory.MALFORMED)

        candidate = (result.get("candidates") or [{}])[0]
        parts = candidate.get("content", {}).get("parts", [])
        text = "".join(p.get("text", "") for p in parts)
        if not text:
            finish_reason = candidate.get("finishReason", "UNKNOWN")
            raise GenerationError(
                f"Gemini returned empty response (finishReason: {finish_reason})",
                ErrorCategory.MALFORMED,
            )

        usage = result.get("usageMetadata", {})
        tokens = (usage.get("promptTokenCount") or 0) + (usage.get("candidatesTokenCount") or 0)
        return {"response": text, "provider": "gemini", "tokens": tokens}

    def _generate_ollama(self, prompt: str, options: Dict[str, Any]) -> Dict[str, Any]:
        """Generate using Ollama"""
        client = ollama.Client(host=self.ollama_config["base_url"], timeout=self.timeout)
        kwargs: Dict[str, Any] = {
            "model": self.ollama_config["model"],
            "prompt": prompt,
            "options": {
                "temperature": options.get("temperature", 0.7),
                "num_predict": options.get("num_predict", 4096),
            },
        }
        if options.get("system_instruction"):
            kwargs["system"] = options["system_instruction"]
        if options.get("json"):
            kwargs["format"] = "json"

        try:
            response = client.generate(**kwargs)
        except ollama.ResponseError as e:
            raise GenerationError(
                f"Ollama error: {e.error}",
                category_for_status(e.status_code),
                status_code=e.status_code,
            )
        except ConnectionError as e:
            raise GenerationError(f"Ollama unreachable: {e}", ErrorCategory.TRANSPORT)
        except httpx.HTTPError as e:
            raise GenerationError(f"Ollama transport error: {e}", ErrorCategory.TRANSPORT)

        text = response.get("response", "") or ""
        if not text:
            raise GenerationError("Ollama returned empty response", ErrorCategory.MALFORMED)
        tokens = (response.get("prompt_eval_count") or 0) + (response.get("eval_count") or 0)
        return {"response": text, "provider": "ollama", "tokens": tokens}
