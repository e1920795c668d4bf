"""
================================================================================
Resilient Action Runner
================================================================================

Cross-browser action resilience for UI automation.

A UI step (open the login page, submit a form, fill a field) is described once
as an `ActionSpec` and executed by `ResilientActionRunner`:

    1. Primary attempt, joined with its post-condition (URL or visibility)
    2. On failure, the `FallbackPolicy` chain for the current browser engine
    3. A terminal `ActionOutcome`: succeeded, succeeded-via-fallback, soft-failed

Every attempt is cut off by the runner after its timeout (`RunnerOptions`),
whether or not the strategy honours the timeout it is given.

Error classes:
    - Transient interaction errors (timeouts, detached or covered elements)
      drive the fallback chain and never reach the caller
    - A closed page/context ends the chain with a soft failure
    - Contract errors (`ActionContractError`) are raised immediately

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from enum import Enum
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Pattern,
    Sequence,
    Tuple,
    Union,
)
from urllib.parse import urljoin

import allure
from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page


UrlPattern = Union[str, Pattern[str], Callable[[str], bool]]
Strategy = Callable[["ActionSpec", int], Awaitable[None]]

PRIMARY_STRATEGY_NAME = "primary"

# Substrings Playwright uses when the page, context or browser is gone
_CLOSED_MARKERS = (
    "has been closed",
    "target closed",
    "browser has disconnected",
)


# =============================================================================
# Errors
# =============================================================================

class ActionContractError(Exception):
    """Raised for programmer errors: malformed specs, missing policies."""
    pass


class NoFallbackPolicyError(ActionContractError):
    """Primary attempt failed and no fallback chain exists for the environment."""
    pass


class UnknownStrategyError(ActionContractError):
    """A fallback policy names a strategy that is not registered."""
    pass


class StrategyNotApplicableError(Exception):
    """A fallback strategy cannot act on the given spec."""
    pass


# asyncio.TimeoutError also covers attempts cut off by the runner's own bound
TRANSIENT_ERRORS = (
    PlaywrightError,
    asyncio.TimeoutError,
    StrategyNotApplicableError,
)


# =============================================================================
# Data Model
# =============================================================================

class ActionKind(str, Enum):
    """Interaction performed on the target element."""

    CLICK = "click"
    FILL = "fill"
    CLEAR = "clear"


class OutcomeStatus(str, Enum):
    """Terminal state of a resilient action."""

    SUCCEEDED = "succeeded"
    SUCCEEDED_VIA_FALLBACK = "succeeded-via-fallback"
    SOFT_FAILED = "soft-failed"


@dataclass(frozen=True)
class ActionSpec:
    """
    Immutable description of a single UI action.

    Attributes:
        target: Locator the action is performed on
        kind: Interaction kind (click, fill, clear)
        value: Payload for fill actions
        expect_url: URL pattern expected after the action (glob, regex or predicate)
        expect_visible: Locator expected to become visible after the action
        navigate_to: Equivalent location for the direct navigation fallback
        require_value: Reject empty payloads for fill actions
        description: Human-readable label for logs and reports
    """

    target: Locator
    kind: ActionKind = ActionKind.CLICK
    value: Optional[str] = None
    expect_url: Optional[UrlPattern] = None
    expect_visible: Optional[Locator] = None
    navigate_to: Optional[str] = None
    require_value: bool = True
    description: str = ""

    def __post_init__(self) -> None:
        if isinstance(self.kind, str) and not isinstance(self.kind, ActionKind):
            try:
                object.__setattr__(self, "kind", ActionKind(self.kind.lower()))
            except ValueError:
                pass  # reported by validate()

    @property
    def page(self) -> Page:
        """Page owning the target locator."""
        return self.target.page

    @property
    def label(self) -> str:
        kind = self.kind.value if isinstance(self.kind, ActionKind) else self.kind
        return self.description or f"{kind} {self.target}"

    @property
    def has_post_condition(self) -> bool:
        return self.expect_url is not None or self.expect_visible is not None

    def validate(self) -> None:
        """
        Check the spec for contract violations.

        Raises:
            ActionContractError: When the spec cannot be executed as written
        """
        if self.target is None:
            raise ActionContractError("ActionSpec.target is required")

        if not isinstance(self.kind, ActionKind):
            raise ActionContractError(
                f"Unknown action kind: {self.kind!r} "
                f"(expected one of {[k.value for k in ActionKind]})"
            )

        if self.kind is ActionKind.FILL:
            if not isinstance(self.value, str):
                raise ActionContractError(
                    f"Fill action '{self.label}' requires a string value"
                )
            if self.require_value and self.value == "":
                raise ActionContractError(
                    f"Fill action '{self.label}' requires a non-empty value"
                )
        elif self.value is not None:
            raise ActionContractError(
                f"'{self.kind.value}' action '{self.label}' does not take a value"
            )

        if self.navigate_to is not None and not self.navigate_to.strip():
            raise ActionContractError(
                f"Action '{self.label}' has an empty navigation target"
            )


@dataclass(frozen=True)
class StrategyAttempt:
    """Diagnostic record of one failed fallback strategy."""

    index: int
    name: str
    error: BaseException
    context_closed: bool = False

    def describe(self) -> str:
        state = " (context closed)" if self.context_closed else ""
        return f"[{self.index}] {self.name}{state}: {_brief(self.error)}"


@dataclass(frozen=True)
class ActionOutcome:
    """
    Result of running an ActionSpec.

    Attributes:
        status: Terminal status
        strategy_index: 0 for the primary attempt, 1..k for fallbacks,
            None when soft-failed
        strategy_name: Name of the strategy that succeeded
        primary_error: Error captured from the primary attempt
        attempts: One diagnostic per failed fallback strategy
    """

    status: OutcomeStatus
    strategy_index: Optional[int] = None
    strategy_name: Optional[str] = None
    primary_error: Optional[BaseException] = None
    attempts: Tuple[StrategyAttempt, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.status is not OutcomeStatus.SOFT_FAILED

    @property
    def soft_failed(self) -> bool:
        return self.status is OutcomeStatus.SOFT_FAILED

    @property
    def used_fallback(self) -> bool:
        return self.status is OutcomeStatus.SUCCEEDED_VIA_FALLBACK

    @property
    def context_closed(self) -> bool:
        return any(attempt.context_closed for attempt in self.attempts)

    def summary(self) -> str:
        lines = [f"status: {self.status.value}"]
        if self.strategy_name is not None:
            lines.append(f"strategy: [{self.strategy_index}] {self.strategy_name}")
        if self.primary_error is not None:
            lines.append(f"primary: {_brief(self.primary_error)}")
        lines.extend(f"fallback {attempt.describe()}" for attempt in self.attempts)
        return "\n".join(lines)


@dataclass(frozen=True)
class RunnerOptions:
    """Timeouts applied by the runner (milliseconds)."""

    primary_timeout_ms: int = 15000
    fallback_timeout_ms: int = 10000

    def __post_init__(self) -> None:
        if self.primary_timeout_ms <= 0 or self.fallback_timeout_ms <= 0:
            raise ActionContractError("Runner timeouts must be positive")

    @classmethod
    def from_config(cls, config: Any) -> "RunnerOptions":
        """Build options from a ConfigLoader-like object (`get(key, default)`)."""
        return cls(
            primary_timeout_ms=int(config.get("resilience.primary_timeout_ms", 15000)),
            fallback_timeout_ms=int(config.get("resilience.fallback_timeout_ms", 10000)),
        )


# =============================================================================
# Helpers
# =============================================================================

def _brief(error: BaseException) -> str:
    message = str(error).strip().splitlines()
    text = message[0][:200] if message else ""
    return f"{type(error).__name__}: {text}" if text else type(error).__name__


def _glob_to_regex(glob: str) -> str:
    """Playwright URL glob: `**` spans segments, `*` stays in one, `{a,b}` alternates."""
    tokens: List[str] = []
    in_group = False
    i = 0
    while i < len(glob):
        char = glob[i]
        if char == "*":
            if glob[i + 1:i + 2] == "*":
                tokens.append(".*")
                i += 2
                continue
            tokens.append("[^/]*")
        elif char == "{":
            in_group = True
            tokens.append("(?:")
        elif char == "}" and in_group:
            in_group = False
            tokens.append(")")
        elif char == "," and in_group:
            tokens.append("|")
        else:
            tokens.append(re.escape(char))
        i += 1
    return "".join(tokens)


def url_matches(url: str, pattern: UrlPattern, base_url: Optional[str] = None) -> bool:
    """
    Match a URL the way Playwright's `wait_for_url` does.

    Strings are globs (`**/login**`) matched against the whole URL; a string
    not starting with `*` is first resolved against `base_url`, so `/login`
    matches `https://sweetshop.netlify.app/login`. Regexes use search,
    predicates are called with the URL.
    """
    if isinstance(pattern, re.Pattern):
        return pattern.search(url) is not None
    if callable(pattern):
        return bool(pattern(url))
    if base_url and not pattern.startswith("*"):
        pattern = urljoin(base_url, pattern)
    return re.fullmatch(_glob_to_regex(pattern), url) is not None


def is_context_closed(page: Optional[Page], error: Optional[BaseException] = None) -> bool:
    """Return True when the page is closed or the error reports a torn-down target."""
    if page is not None:
        try:
            if page.is_closed():
                return True
        except PlaywrightError:
            return True
    if error is not None:
        message = str(error).lower()
        return any(marker in message for marker in _CLOSED_MARKERS)
    return False


async def _settle(*awaitables: Awaitable[Any]) -> None:
    """Run awaitables concurrently, wait for all of them, then raise the first error."""
    results = await asyncio.gather(*awaitables, return_exceptions=True)
    errors = [result for result in results if isinstance(result, BaseException)]
    for error in errors:
        if isinstance(error, asyncio.CancelledError):
            raise error
    if errors:
        raise errors[0]


def _post_conditions(spec: ActionSpec, timeout: int) -> List[Awaitable[Any]]:
    waits: List[Awaitable[Any]] = []
    if spec.expect_url is not None:
        waits.append(spec.page.wait_for_url(spec.expect_url, timeout=timeout))
    if spec.expect_visible is not None:
        waits.append(spec.expect_visible.wait_for(state="visible", timeout=timeout))
    return waits


def _interaction(spec: ActionSpec, timeout: int, force: bool = False) -> Awaitable[None]:
    target = spec.target
    if spec.kind is ActionKind.CLICK:
        return target.click(timeout=timeout, force=force)
    if spec.kind is ActionKind.FILL:
        return target.fill(spec.value, timeout=timeout, force=force)
    return target.clear(timeout=timeout, force=force)


# =============================================================================
# Strategies
# =============================================================================

def strategy(name: str) -> Callable[[Strategy], Strategy]:
    """Tag a strategy coroutine function with its policy name."""
    def decorator(func: Strategy) -> Strategy:
        func.strategy_name = name  # type: ignore[attr-defined]
        return func
    return decorator


def strategy_name(func: Strategy) -> str:
    return getattr(func, "strategy_name", None) or getattr(func, "__name__", repr(func))


@strategy(PRIMARY_STRATEGY_NAME)
async def primary_strategy(spec: ActionSpec, timeout: int) -> None:
    """Regular interaction joined with its post-condition."""
    await _settle(_interaction(spec, timeout), *_post_conditions(spec, timeout))


@strategy("force")
async def force_strategy(spec: ActionSpec, timeout: int) -> None:
    """Interaction with actionability checks bypassed (`force=True`)."""
    await _settle(_interaction(spec, timeout, force=True), *_post_conditions(spec, timeout))


@strategy("navigate")
async def navigate_strategy(spec: ActionSpec, timeout: int) -> None:
    """
    Go straight to the location the action was expected to reach.

    Skips the navigation when the current URL already matches `expect_url`
    (relative patterns resolve against the current page's origin). After
    navigating, `expect_url` is verified by Playwright itself.
    """
    if spec.navigate_to is None:
        raise StrategyNotApplicableError(
            f"'{spec.label}' has no navigation target"
        )

    page = spec.page
    if spec.expect_url is not None and url_matches(page.url, spec.expect_url, base_url=page.url):
        logger.debug(f"Already at expected location for '{spec.label}': {page.url}")
        return

    await page.goto(spec.navigate_to, wait_until="domcontentloaded", timeout=timeout)

    if spec.expect_url is not None:
        await page.wait_for_url(spec.expect_url, timeout=timeout)
    if spec.expect_visible is not None:
        await spec.expect_visible.wait_for(state="visible", timeout=timeout)


_CLICK_SCRIPT = "el => el.click()"
_SET_VALUE_SCRIPT = """(el, value) => {
    el.value = value;
    el.dispatchEvent(new Event('input', { bubbles: true }));
    el.dispatchEvent(new Event('change', { bubbles: true }));
}"""


@strategy("dom_invoke")
async def dom_invoke_strategy(spec: ActionSpec, timeout: int) -> None:
    """Invoke the element directly in the page, bypassing interactability checks."""
    if spec.kind is ActionKind.CLICK:
        invocation = spec.target.evaluate(_CLICK_SCRIPT, timeout=timeout)
    else:
        invocation = spec.target.evaluate(
            _SET_VALUE_SCRIPT, spec.value or "", timeout=timeout
        )
    await _settle(invocation, *_post_conditions(spec, timeout))


BUILTIN_STRATEGIES: Dict[str, Strategy] = {
    "force": force_strategy,
    "navigate": navigate_strategy,
    "dom_invoke": dom_invoke_strategy,
}


# =============================================================================
# Fallback Policy
# =============================================================================

class FallbackPolicy:
    """
    Ordered fallback strategies keyed by browser engine.

    Usage:
        >>> policy = FallbackPolicy({"firefox": ["force", "navigate", "dom_invoke"]})
        >>> policy.chain_for("firefox")
        (<force>, <navigate>, <dom_invoke>)
        >>> policy.chain_for("chromium") is None
        True
    """

    DEFAULT_KEY = "default"

    def __init__(
        self,
        chains: Optional[Mapping[str, Sequence[Union[str, Strategy]]]] = None,
        default: Optional[Sequence[Union[str, Strategy]]] = None,
    ):
        self._chains: Dict[str, Tuple[Strategy, ...]] = {
            env.lower(): self._resolve(chain) for env, chain in (chains or {}).items()
        }
        self._default = self._resolve(default) if default is not None else None

    @staticmethod
    def _resolve(chain: Sequence[Union[str, Strategy]]) -> Tuple[Strategy, ...]:
        if not isinstance(chain, (list, tuple)):
            raise ActionContractError(
                f"Fallback chain must be a list of strategies, got {chain!r}"
            )

        resolved: List[Strategy] = []
        for item in chain:
            if isinstance(item, str):
                try:
                    resolved.append(BUILTIN_STRATEGIES[item])
                except KeyError:
                    raise UnknownStrategyError(
                        f"Unknown fallback strategy '{item}' "
                        f"(known: {sorted(BUILTIN_STRATEGIES)})"
                    ) from None
            elif callable(item):
                resolved.append(item)
            else:
                raise ActionContractError(f"Invalid fallback strategy: {item!r}")
        return tuple(resolved)

    @classmethod
    def from_config(cls, config: Any) -> "FallbackPolicy":
        """Build a policy from `resilience.fallback_policy` in configuration."""
        raw = config.get("resilience.fallback_policy", {}) or {}
        if not isinstance(raw, dict):
            raise ActionContractError(
                f"resilience.fallback_policy must be a mapping, got {type(raw).__name__}"
            )
        chains = {env: chain for env, chain in raw.items() if env != cls.DEFAULT_KEY}
        return cls(chains, default=raw.get(cls.DEFAULT_KEY))

    def chain_for(self, env: str) -> Optional[Tuple[Strategy, ...]]:
        """Return the strategy chain for `env`, falling back to the default chain."""
        chain = self._chains.get((env or "").lower())
        return chain if chain is not None else self._default

    @property
    def environments(self) -> List[str]:
        return sorted(self._chains)

    def __contains__(self, env: str) -> bool:
        return self.chain_for(env) is not None

    def __repr__(self) -> str:
        chains = {
            env: [strategy_name(s) for s in chain] for env, chain in self._chains.items()
        }
        return f"FallbackPolicy({chains})"


# =============================================================================
# Runner
# =============================================================================

class ResilientActionRunner:
    """
    Executes ActionSpecs with per-browser fallback strategies.

    The runner holds no page state; every `run()` borrows the page owning
    `spec.target` for the duration of the call.

    Usage:
        runner = ResilientActionRunner(RunnerOptions(primary_timeout_ms=15000))
        outcome = await runner.run(
            ActionSpec(
                target=page.locator("a[href='/login']"),
                expect_url=re.compile(r"/login"),
                navigate_to="/login",
            ),
            FallbackPolicy({"firefox": ["force", "navigate"]}),
            env="firefox",
        )
        assert outcome.succeeded
    """

    def __init__(self, options: Optional[RunnerOptions] = None):
        self.options = options or RunnerOptions()

    async def run(
        self,
        spec: ActionSpec,
        policy: FallbackPolicy,
        env: str,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ActionOutcome:
        """
        Run the action and its fallback chain.

        Args:
            spec: Action to perform
            policy: Fallback strategies per browser engine
            env: Browser engine driving the page ('chromium', 'firefox', 'webkit')
            cancel_event: Optional signal; once set no further strategy starts

        Returns:
            ActionOutcome describing how the action completed

        Raises:
            ActionContractError: Invalid spec, or primary failure with no
                fallback chain for `env`
            asyncio.CancelledError: Cancellation observed between strategies
        """
        spec.validate()

        with allure.step(f"Resilient {spec.kind.value}: {spec.label} [{env}]"):
            return await self._run(spec, policy, env, cancel_event)

    async def _run(
        self,
        spec: ActionSpec,
        policy: FallbackPolicy,
        env: str,
        cancel_event: Optional[asyncio.Event],
    ) -> ActionOutcome:
        self._check_cancelled(cancel_event, spec)

        try:
            with allure.step(f"Primary attempt ({self.options.primary_timeout_ms}ms)"):
                await self._bounded(primary_strategy, spec, self.options.primary_timeout_ms)
        except TRANSIENT_ERRORS as e:
            primary_error = e
        else:
            logger.debug(f"✅ '{spec.label}' succeeded on primary attempt")
            return ActionOutcome(
                status=OutcomeStatus.SUCCEEDED,
                strategy_index=0,
                strategy_name=PRIMARY_STRATEGY_NAME,
            )

        chain = policy.chain_for(env)
        if not chain:
            logger.error(
                f"❌ '{spec.label}' failed on {env} and no fallback policy applies: "
                f"{_brief(primary_error)}"
            )
            raise NoFallbackPolicyError(
                f"Primary attempt for '{spec.label}' failed and no fallback "
                f"policy is defined for environment '{env}'"
            ) from primary_error

        logger.warning(
            f"⚠️ Primary attempt for '{spec.label}' failed on {env}: "
            f"{_brief(primary_error)}"
        )

        attempts: List[StrategyAttempt] = []

        if is_context_closed(spec.page, primary_error):
            logger.warning(f"⚠️ Page closed during '{spec.label}', skipping fallbacks")
            return self._soft_fail(spec, primary_error, attempts)

        for index, fallback in enumerate(chain, start=1):
            self._check_cancelled(cancel_event, spec)

            if is_context_closed(spec.page):
                logger.warning(
                    f"⚠️ Page closed before fallback {index} for '{spec.label}', "
                    f"skipping remaining fallbacks"
                )
                return self._soft_fail(spec, primary_error, attempts)

            name = strategy_name(fallback)
            try:
                with allure.step(f"Fallback {index}: {name}"):
                    await self._bounded(fallback, spec, self.options.fallback_timeout_ms)
            except TRANSIENT_ERRORS as e:
                closed = is_context_closed(spec.page, e)
                attempts.append(StrategyAttempt(index, name, e, closed))
                if closed:
                    logger.warning(
                        f"⚠️ Page closed during fallback {index} ({name}) for "
                        f"'{spec.label}', skipping remaining fallbacks"
                    )
                    return self._soft_fail(spec, primary_error, attempts)
                logger.warning(
                    f"⚠️ Fallback {index}/{len(chain)} ({name}) failed for "
                    f"'{spec.label}': {_brief(e)}"
                )
                continue

            logger.info(
                f"✅ '{spec.label}' succeeded via fallback {index} ({name}) on {env}"
            )
            return ActionOutcome(
                status=OutcomeStatus.SUCCEEDED_VIA_FALLBACK,
                strategy_index=index,
                strategy_name=name,
                primary_error=primary_error,
                attempts=tuple(attempts),
            )

        return self._soft_fail(spec, primary_error, attempts)

    @staticmethod
    async def _bounded(func: Strategy, spec: ActionSpec, timeout_ms: int) -> None:
        """Run one strategy, cutting it off after `timeout_ms` whatever it does internally."""
        try:
            await asyncio.wait_for(func(spec, timeout_ms), timeout=timeout_ms / 1000)
        except asyncio.TimeoutError as e:
            raise asyncio.TimeoutError(
                f"{strategy_name(func)} exceeded {timeout_ms}ms"
            ) from e

    @staticmethod
    def _check_cancelled(cancel_event: Optional[asyncio.Event], spec: ActionSpec) -> None:
        if cancel_event is not None and cancel_event.is_set():
            logger.warning(f"Cancellation requested, abandoning '{spec.label}'")
            raise asyncio.CancelledError()

    @staticmethod
    def _soft_fail(
        spec: ActionSpec,
        primary_error: BaseException,
        attempts: List[StrategyAttempt],
    ) -> ActionOutcome:
        outcome = ActionOutcome(
            status=OutcomeStatus.SOFT_FAILED,
            primary_error=primary_error,
            attempts=tuple(attempts),
        )
        logger.error(f"❌ '{spec.label}' soft-failed:\n{outcome.summary()}")
        allure.attach(
            outcome.summary(),
            name=f"soft-failure: {spec.label}",
            attachment_type=allure.attachment_type.TEXT,
        )
        return outcome


__all__ = [
    "ActionContractError",
    "ActionKind",
    "ActionOutcome",
    "ActionSpec",
    "BUILTIN_STRATEGIES",
    "FallbackPolicy",
    "NoFallbackPolicyError",
    "OutcomeStatus",
    "ResilientActionRunner",
    "RunnerOptions",
    "StrategyAttempt",
    "StrategyNotApplicableError",
    "UnknownStrategyError",
    "dom_invoke_strategy",
    "force_strategy",
    "is_context_closed",
    "navigate_strategy",
    "primary_strategy",
    "strategy",
    "url_matches",
]
