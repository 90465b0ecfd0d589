import asyncio
import logging
from datetime import date
from typing import Optional

from models.generation import GenerationRequest, ShapedOutput, ValidationError
from models.platform import PLATFORM_CONFIGS, Platform
from helpers.completion import CompletionClient
from helpers.prompts import build_prompt
from helpers.shaper import build_output, shape, shape_section
from services.usage_store import InMemoryUsageStore, UsageStore, usage_key

logger = logging.getLogger(__name__)

STRATEGY_PER_PLATFORM = "per_platform"
STRATEGY_COMBINED = "combined"
STRATEGY_JSON = "json"
STRATEGIES = (STRATEGY_PER_PLATFORM, STRATEGY_COMBINED)

__all__ = [
    "GenerationService",
    "UsageLimitExceeded",
    "ValidationError",
    "STRATEGY_PER_PLATFORM",
    "STRATEGY_COMBINED",
    "STRATEGY_JSON",
]


class UsageLimitExceeded(Exception):
    """The caller reached the daily generation ceiling."""

    def __init__(self, limit: int):
        super().__init__(f"Daily usage limit of {limit} reached")
        self.limit = limit


class GenerationService:
    """
    Orchestrates prompt building, the completion call and response shaping.

    Plain requests for several platforms either run one completion per
    platform concurrently (``per_platform``) or a single completion with
    tagged sections (``combined``). Strategic requests always use one
    completion answered with the JSON envelope.
    """

    def __init__(
        self,
        client: CompletionClient,
        usage_store: Optional[UsageStore] = None,
        daily_limit: int = 0,
        brand_line: str = "",
        strategy: str = STRATEGY_PER_PLATFORM,
    ):
        self.client = client
        self.usage_store = usage_store or InMemoryUsageStore()
        self.daily_limit = daily_limit or 0
        self.brand_line = brand_line or ""
        self.strategy = strategy if strategy in STRATEGIES else STRATEGY_PER_PLATFORM

    @classmethod
    def from_config(cls, config, client, usage_store):
        return cls(
            client=client,
            usage_store=usage_store,
            daily_limit=config.get("DAILY_USAGE_LIMIT", 0),
            brand_line=config.get("BRAND_LINE", ""),
            strategy=config.get("GENERATION_STRATEGY", STRATEGY_PER_PLATFORM),
        )

    @property
    def usage_enabled(self) -> bool:
        return self.daily_limit > 0

    def check_usage(self, identity: str, today: Optional[date] = None) -> int:
        """
        Apply the daily usage gate for one caller.

        Returns:
            The caller's count after this request, 0 when the gate is off.

        Raises:
            UsageLimitExceeded: If the caller is already at the ceiling. The
                counter is not incremented in that case.
        """
        if not self.usage_enabled:
            return 0

        key = usage_key(identity, today or date.today())
        if self.usage_store.get(key) >= self.daily_limit:
            logger.warning(f"Usage limit {self.daily_limit} reached for {identity}")
            raise UsageLimitExceeded(self.daily_limit)
        return self.usage_store.increment(key)

    async def generate(self, request: GenerationRequest) -> ShapedOutput:
        """
        Produce the shaped output for a request.

        Raises:
            CompletionError: Any configuration, upstream or transport
                failure of a completion call. No partial output is returned.
        """
        if request.is_strategic:
            return await self._generate_strategic(request)
        if self.strategy == STRATEGY_COMBINED and len(request.platforms) > 1:
            return await self._generate_combined(request)
        return await self._generate_per_platform(request)

    async def _complete_platform(self, request, platform: Platform) -> str:
        prompt = build_prompt(request, platforms=(platform,), brand_line=self.brand_line)
        raw = await self.client.complete(
            prompt, max_tokens=PLATFORM_CONFIGS[platform].max_tokens
        )
        return shape_section(raw, platform, self.brand_line)

    async def _generate_per_platform(self, request) -> ShapedOutput:
        platforms = request.platforms
        logger.info(
            f"Generating {len(platforms)} platform post(s) in {request.language}: "
            f"{', '.join(p.value for p in platforms)}"
        )
        tasks = [
            asyncio.ensure_future(self._complete_platform(request, platform))
            for platform in platforms
        ]
        try:
            texts = await asyncio.gather(*tasks)
        except Exception:
            for task in tasks:
                task.cancel()
            raise

        return build_output(
            dict(zip(platforms, texts)),
            request,
            platforms,
            meta={"strategy": STRATEGY_PER_PLATFORM},
        )

    async def _generate_combined(self, request) -> ShapedOutput:
        platforms = request.platforms
        logger.info(
            f"Generating combined post for {', '.join(p.value for p in platforms)}"
        )
        prompt = build_prompt(request, platforms=platforms, brand_line=self.brand_line)
        max_tokens = sum(PLATFORM_CONFIGS[p].max_tokens for p in platforms)
        raw = await self.client.complete(prompt, max_tokens=max_tokens)
        output = shape(raw, request, platforms, brand_line=self.brand_line)
        output.meta["strategy"] = STRATEGY_COMBINED
        return output

    async def _generate_strategic(self, request) -> ShapedOutput:
        logger.info(f"Generating strategic content, mode={request.mode or 'post'}")
        prompt = build_prompt(request, brand_line=self.brand_line)
        raw = await self.client.complete(prompt)
        output = shape(raw, request, request.platforms, brand_line=self.brand_line)
        output.meta["strategy"] = STRATEGY_JSON
        return output
