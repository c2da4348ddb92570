"""Gemini-backed extraction of loan application fields from free text."""

import json
import logging
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from google import genai
from google.genai import types

from coop_lending.config import ExtractionConfig
from coop_lending.exceptions import ConfigurationError, ExtractionError
from coop_lending.extraction.fields import EXTRACTABLE_FIELDS

logger = logging.getLogger(__name__)

_INSTRUCTIONS = (
    "Extract customer information from the unstructured text below for a "
    "cooperative pension-backed loan application.\n"
    "Rules:\n"
    "- salaryAmount is the monthly pension salary (Gaji Pensiun).\n"
    "- Infer loanType (NEW, TOPUP or TAKEOVER).\n"
    "- Fees: Admin, Provisi, Marketing, Cadangan Resiko (riskReserve), Biaya Flagging (flaggingFee).\n"
    "- Simpanan Pokok is principalSavings, Simpanan Wajib is mandatorySavings.\n"
    "- Pelunasan, Tutup Hutang, Sisa Hutang, Takeover or PKA amounts go to repaymentAmount, "
    "and set repaymentType when such an amount exists.\n"
    "- An interest rate stated per month means interestType FLAT; per year or unspecified means ANNUITY.\n"
    "- Tanggal Pinjaman or Tanggal Pengajuan is loanDate.\n"
    "- Mutasi or Pindah Kantor Bayar is mutationOffice.\n"
    "- Dates use YYYY-MM-DD, amounts are plain numbers without separators.\n"
    "- Omit fields that are not present. Respond with a single JSON object.\n"
)


def _describe_field(name: str, kind: Any) -> str:
    if kind is date:
        return f"{name}: date (YYYY-MM-DD)"
    if kind in (Decimal, int):
        return f"{name}: number"
    if isinstance(kind, type) and issubclass(kind, Enum):
        return f"{name}: one of {', '.join(m.value for m in kind)}"
    return f"{name}: string"


def build_prompt(text: str) -> str:
    """Assemble the extraction prompt for a block of pasted text."""
    field_lines = "\n".join(
        f"- {_describe_field(name, kind)}" for name, (_, _, kind) in EXTRACTABLE_FIELDS.items()
    )
    return f'{_INSTRUCTIONS}\nFields:\n{field_lines}\n\nText to process:\n"""{text}"""'


class GeminiExtractor:
    """Text extractor calling a Gemini generative model."""

    def __init__(self, config: ExtractionConfig | None = None, client: Any = None) -> None:
        """Initialize the extractor.

        Parameters
        ----------
        config : ExtractionConfig | None
            API key and model name.
        client : Any
            Pre-built client exposing ``models.generate_content``; when
            omitted one is created from ``config``.

        Raises
        ------
        ConfigurationError
            If no client is given and no API key is configured.
        """
        self.config = config or ExtractionConfig()
        if client is None:
            if not self.config.api_key:
                raise ConfigurationError("GEMINI_API_KEY is not set; text extraction is unavailable")
            client = genai.Client(api_key=self.config.api_key)
            logger.info("Extraction model %s configured", self.config.model_name)
        self.client = client

    def extract(self, text: str) -> dict[str, Any]:
        """Ask the model for field suggestions.

        Raises
        ------
        ExtractionError
            If the text is blank, the call fails or the reply is not a
            JSON object.
        """
        if not text or not text.strip():
            raise ExtractionError("No text to extract from")

        try:
            response = self.client.models.generate_content(
                model=self.config.model_name,
                contents=build_prompt(text),
                config=types.GenerateContentConfig(
                    temperature=0.1,
                    response_mime_type="application/json",
                ),
            )
            reply = response.text
        except Exception as exc:
            raise ExtractionError(f"Extraction request failed: {exc}") from exc

        try:
            data = json.loads(reply or "{}")
        except ValueError as exc:
            raise ExtractionError(f"Extraction reply is not JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ExtractionError("Extraction reply must be a JSON object")

        logger.debug("Extracted %d raw fields", len(data))
        return data
