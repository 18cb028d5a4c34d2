"""
Capability adapter: routes an operation to a provider call.

Given an OperationRequest and the caller's AISettings, the adapter:
1. Resolves which provider serves the call (cover art always needs an image-capable one)
2. Checks that a credential exists for it, before any network traffic
3. Looks up the (operation, provider) plan in the dispatch table
4. Renders the contract the way that provider consumes it
5. Issues exactly one transport call and returns the raw output

There are no retries and no provider fallback: failures propagate as-is.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from hymnforge.config import GEMINI, TEMPERATURES, ZHIPU, ZHIPU_TIPS_TEMPERATURE
from hymnforge.errors import PreconditionError
from hymnforge.models import AISettings, Operation, OperationRequest
from hymnforge.prompts import (
    ANALYSIS_SYSTEM_INSTRUCTION,
    ASSET_GENERATION_SYSTEM_INSTRUCTION,
    GENERATION_SYSTEM_INSTRUCTION,
    OPTIMIZATION_SYSTEM_INSTRUCTION,
    TIPS_SYSTEM_INSTRUCTION,
    analysis_prompt,
    assets_prompt,
    cover_prompt,
    generation_prompt,
    optimization_prompt,
    tips_prompt,
    with_schema,
)
from hymnforge.providers import CompletionRequest, Provider, ProviderConfig, ResponseMode, create_provider
from hymnforge.schemas import ANALYSIS, ASSETS, GENERATION, Contract, SchemaFormat, render

logger = logging.getLogger(__name__)

# (provider tag, api key) -> Provider
ProviderFactory = Callable[[str, str], Provider]


@dataclass(frozen=True)
class CallPlan:
    """How one operation is carried out on one provider.

    Attributes:
        build_prompt: Turns the operation request into the prompt body
        mode: Response mode requested from the transport
        system_instruction: System prompt, if any
        temperature: Sampling temperature; None keeps the provider default
        contract: Structured-output contract for JSON modes
        web_search: Ask the provider to attach its live search tool
    """
    build_prompt: Callable[[Any], str]
    mode: ResponseMode
    system_instruction: Optional[str] = None
    temperature: Optional[float] = None
    contract: Optional[Contract] = None
    web_search: bool = False


_ANALYZE = CallPlan(
    build_prompt=lambda r: analysis_prompt(r.lyrics),
    mode=ResponseMode.JSON,
    system_instruction=ANALYSIS_SYSTEM_INSTRUCTION,
    temperature=TEMPERATURES["analyze"],
    contract=ANALYSIS,
)
_GENERATE = CallPlan(
    build_prompt=lambda r: generation_prompt(r.theme, r.style),
    mode=ResponseMode.JSON,
    system_instruction=GENERATION_SYSTEM_INSTRUCTION,
    temperature=TEMPERATURES["generate"],
    contract=GENERATION,
)
_OPTIMIZE = CallPlan(
    build_prompt=lambda r: optimization_prompt(r.lyrics, r.suggestions),
    mode=ResponseMode.TEXT,
    system_instruction=OPTIMIZATION_SYSTEM_INSTRUCTION,
    temperature=TEMPERATURES["optimize"],
)
_ASSETS = CallPlan(
    build_prompt=lambda r: assets_prompt(r.title, r.lyrics, r.style),
    mode=ResponseMode.JSON,
    system_instruction=ASSET_GENERATION_SYSTEM_INSTRUCTION,
    temperature=TEMPERATURES["assets"],
    contract=ASSETS,
)

DISPATCH: dict[tuple[Operation, str], CallPlan] = {
    (Operation.ANALYZE, GEMINI): _ANALYZE,
    (Operation.ANALYZE, ZHIPU): _ANALYZE,
    (Operation.GENERATE, GEMINI): _GENERATE,
    (Operation.GENERATE, ZHIPU): _GENERATE,
    (Operation.OPTIMIZE, GEMINI): _OPTIMIZE,
    (Operation.OPTIMIZE, ZHIPU): _OPTIMIZE,
    (Operation.GENERATE_ASSETS, GEMINI): _ASSETS,
    (Operation.GENERATE_ASSETS, ZHIPU): _ASSETS,
    (Operation.GENERATE_COVER_IMAGE, GEMINI): CallPlan(
        build_prompt=lambda r: cover_prompt(r.title, r.lyrics),
        mode=ResponseMode.IMAGE,
    ),
    (Operation.SEARCH_TIPS, GEMINI): CallPlan(
        build_prompt=lambda r: tips_prompt(r.query, live_search=True),
        mode=ResponseMode.TEXT,
        web_search=True,
    ),
    # No search tool on this path: answers reflect the model's training data only.
    (Operation.SEARCH_TIPS, ZHIPU): CallPlan(
        build_prompt=lambda r: tips_prompt(r.query, live_search=False),
        mode=ResponseMode.TEXT,
        system_instruction=TIPS_SYSTEM_INSTRUCTION,
        temperature=ZHIPU_TIPS_TEMPERATURE,
    ),
}


def providers_for(operation: Operation) -> list[str]:
    """Provider tags wired for an operation, in table order."""
    return [provider for (op, provider) in DISPATCH if op is operation]


def uses_live_search(operation: Operation, provider: str) -> bool:
    """Whether the (operation, provider) plan attaches a live web search."""
    plan = DISPATCH.get((operation, provider))
    return plan is not None and plan.web_search


class CapabilityAdapter:
    """Dispatches operation requests to provider transports.

    Usage:
        adapter = CapabilityAdapter()
        raw = adapter.execute(AnalyzeRequest(lyrics="..."), settings)

    Args:
        provider_factory: Builds a Provider from (tag, api_key); defaults to
            `create_provider` with the matching entry of `configs`
        configs: Optional per-provider transport configuration
    """

    def __init__(
        self,
        provider_factory: Optional[ProviderFactory] = None,
        configs: Optional[dict[str, ProviderConfig]] = None,
    ):
        self.configs = configs or {}
        self.provider_factory = provider_factory or self._default_factory

    def _default_factory(self, name: str, api_key: str) -> Provider:
        return create_provider(name, api_key, self.configs.get(name))

    def resolve_provider(self, operation: Operation, settings: AISettings) -> str:
        """Pick the provider tag that will serve this operation.

        Raises:
            PreconditionError: No usable credential for the routed provider
        """
        candidates = providers_for(operation)
        if settings.provider in candidates and settings.api_key:
            return settings.provider

        if settings.provider not in candidates:
            # The active provider cannot serve this operation; borrow one that can.
            for name in candidates:
                if settings.credentials.has(name):
                    logger.debug(
                        "%s not available on %s, routing to %s",
                        operation.value, settings.provider, name,
                    )
                    return name
            needed = ", ".join(candidates)
            raise PreconditionError(
                f"'{operation.value}' requires a {needed} API key "
                f"(active provider '{settings.provider}' cannot serve it)"
            )

        raise PreconditionError(f"API key for provider '{settings.provider}' is not set")

    def plan(self, operation: Operation, provider: str) -> CallPlan:
        try:
            return DISPATCH[(operation, provider)]
        except KeyError:
            raise PreconditionError(
                f"Operation '{operation.value}' is not supported by provider '{provider}'"
            ) from None

    def build_request(
        self,
        plan: CallPlan,
        request: OperationRequest,
        provider: Provider,
    ) -> CompletionRequest:
        """Assemble the transport request, rendering the contract for this provider."""
        prompt = plan.build_prompt(request)
        schema = None
        if plan.contract is not None:
            rendered = render(plan.contract, provider.schema_format)
            if provider.schema_format is SchemaFormat.NATIVE:
                schema = rendered
            else:
                prompt = with_schema(prompt, rendered)
        return CompletionRequest(
            prompt=prompt,
            system_instruction=plan.system_instruction,
            temperature=plan.temperature,
            mode=plan.mode,
            schema=schema,
            web_search=plan.web_search and provider.supports_web_search,
        )

    def execute(self, request: OperationRequest, settings: AISettings) -> Any:
        """Run one operation and return the provider's raw output.

        Returns:
            Reply text for text/JSON operations, or the provider's raw image response
        """
        operation = request.operation
        name = self.resolve_provider(operation, settings)
        plan = self.plan(operation, name)
        provider = self.provider_factory(name, settings.credentials.get(name))

        logger.debug("dispatch %s -> %s (%s)", operation.value, name, plan.mode.value)
        if plan.mode is ResponseMode.IMAGE:
            if not provider.supports_images:
                raise PreconditionError(f"Provider '{name}' cannot generate images")
            return provider.generate_image(plan.build_prompt(request))
        return provider.complete(self.build_request(plan, request, provider))
