"""Client for the external text-to-APU service.

The service takes a free-text description of a work item and answers with
``{description?, unit?, resources?}``. An empty answer, an unconfigured
service or a failed call all mean "nothing generated": the caller keeps its
data as it is.
"""
import httpx
from pydantic import ValidationError

from apu_estimator.core.config import settings
from apu_estimator.core.logging import logger
from apu_estimator.schemas.editor import GeneratedApu


class ApuGenerator:
    def __init__(self, url: str | None = None, api_key: str | None = None,
                 timeout_s: float | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.url = url if url is not None else settings.GENERATOR_URL
        self.api_key = api_key if api_key is not None else settings.GENERATOR_API_KEY
        self.timeout_s = timeout_s if timeout_s is not None else settings.GENERATOR_TIMEOUT_S
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.url)

    async def generate(self, description: str) -> GeneratedApu | None:
        if not self.configured:
            logger.info("generation_skipped", reason="not_configured")
            return None
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
                resp = await client.post(self.url, json={"prompt": description}, headers=headers)
                resp.raise_for_status()
                data = resp.json() if resp.content else None
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("generation_failed", error=str(e))
            return None

        if not data:
            return None
        try:
            generated = GeneratedApu.model_validate(data)
        except ValidationError as e:
            logger.warning("generation_invalid", errors=e.error_count())
            return None
        logger.info("generation_done", resources=len(generated.resources or []))
        return generated


_generator: ApuGenerator | None = None


def get_generator() -> ApuGenerator:
    global _generator
    if _generator is None:
        _generator = ApuGenerator()
    return _generator
