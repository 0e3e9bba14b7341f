"""Language-model field extraction for ID card OCR text.

Sends raw OCR text to an OpenAI-compatible chat-completion endpoint in
JSON mode and validates the returned fields.
"""

import json
from typing import Any

import httpx

from src.utils.config import ExtractionConfig
from src.utils.logger import get_logger

from .cnic import normalize_cnic
from .rule_extractor import CardFields

logger = get_logger(__name__)

SYSTEM_PROMPT = """You are an expert at extracting information from Pakistani National Identity Card (CNIC) OCR text.
Extract the following information from the raw OCR text:
1. Full Name - the card holder's complete name, usually after the "Name" label.
2. Father Name - the name after the "Father Name" label, or after S/O (son of) or D/O (daughter of).
3. CNIC Number - 13 digits, usually after the "Identity Number" label.

Return ONLY a valid JSON object with exactly these keys: fullName, fatherName, cnicNumber.
If a field is not found, set it to null.
Format the CNIC number as XXXXX-XXXXXXX-X (with dashes).
Format names in Title Case (e.g. "Muhammad Ali Khan", not "MUHAMMAD ALI KHAN")."""

_RESPONSE_KEYS = {
    "fullName": "full_name",
    "fatherName": "father_name",
    "cnicNumber": "cnic_number",
}


class LLMExtractionError(RuntimeError):
    """Raised when the language-model extraction call fails."""


class LLMExtractor:
    """Chat-completion based extractor for CNIC holder fields.

    Args:
        config: Extraction configuration with endpoint and model settings.
        client: Optional preconfigured ``httpx.Client``; one is created
            per call when omitted.
    """

    def __init__(
        self, config: ExtractionConfig, client: httpx.Client | None = None
    ) -> None:
        self.config = config
        self._client = client

    @property
    def endpoint(self) -> str:
        """Chat-completion URL."""
        return self.config.llm_base_url.rstrip("/") + "/chat/completions"

    def build_payload(self, raw_text: str) -> dict[str, Any]:
        """Build the chat-completion request body."""
        return {
            "model": self.config.llm_model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": (
                        "Extract the Full Name, Father Name, and CNIC Number "
                        f"from this OCR text:\n\n{raw_text}"
                    ),
                },
            ],
            "temperature": self.config.temperature,
            "response_format": {"type": "json_object"},
        }

    def extract(self, raw_text: str) -> CardFields:
        """Extract name, father name, and CNIC from OCR text.

        Args:
            raw_text: Raw OCR text.

        Returns:
            Validated fields; fields the model could not find are ``None``.

        Raises:
            LLMExtractionError: If the key is missing, the request fails,
                or the response is not the expected JSON object.
        """
        api_key = self.config.api_key()
        if not api_key:
            raise LLMExtractionError(
                f"LLM API key is not configured (set {self.config.api_key_env})"
            )

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }
        payload = self.build_payload(raw_text)

        try:
            if self._client is not None:
                resp = self._client.post(self.endpoint, headers=headers, json=payload)
            else:
                with httpx.Client(timeout=self.config.timeout_s) as client:
                    resp = client.post(self.endpoint, headers=headers, json=payload)
        except httpx.HTTPError as exc:
            raise LLMExtractionError(f"LLM request failed: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            raise LLMExtractionError(
                f"LLM API error: HTTP {resp.status_code}: {resp.text[:500]}"
            )

        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise LLMExtractionError("No content in LLM response") from exc
        if not content:
            raise LLMExtractionError("No content in LLM response")

        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise LLMExtractionError(f"LLM returned invalid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise LLMExtractionError("LLM response is not a JSON object")

        result = self.parse_fields(data)
        logger.info(
            "LLM extraction: name=%s father=%s cnic=%s",
            result.full_name is not None,
            result.father_name is not None,
            result.cnic_number is not None,
        )
        return result

    @staticmethod
    def parse_fields(data: dict[str, Any]) -> CardFields:
        """Keep non-empty string fields and re-normalize the CNIC."""
        values: dict[str, str | None] = {}
        for key, attr in _RESPONSE_KEYS.items():
            value = data.get(key)
            if isinstance(value, str) and value.strip():
                values[attr] = value.strip()
            else:
                values[attr] = None

        return CardFields(
            full_name=values["full_name"],
            father_name=values["father_name"],
            cnic_number=normalize_cnic(values["cnic_number"]),
            method="llm",
        )
