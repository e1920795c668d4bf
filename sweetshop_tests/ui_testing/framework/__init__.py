"""
================================================================================
UI Testing Framework
================================================================================

Playwright-based UI automation framework with cross-browser action resilience.

Components:
    - resilient_action: ActionSpec / FallbackPolicy / ResilientActionRunner
    - page_base: Base page object and ResilienceProfile
    - browser_manager: Browser lifecycle management
    - config_loader: YAML + environment configuration

Author: Automation Team
License: MIT
================================================================================
"""

from .browser_manager import BrowserManager
from .config_loader import ConfigLoader, ConfigurationError
from .page_base import BasePage, ResilienceProfile
from .resilient_action import (
    ActionContractError,
    ActionKind,
    ActionOutcome,
    ActionSpec,
    FallbackPolicy,
    NoFallbackPolicyError,
    OutcomeStatus,
    ResilientActionRunner,
    RunnerOptions,
)

__all__ = [
    "ActionContractError",
    "ActionKind",
    "ActionOutcome",
    "ActionSpec",
    "BasePage",
    "BrowserManager",
    "ConfigLoader",
    "ConfigurationError",
    "FallbackPolicy",
    "NoFallbackPolicyError",
    "OutcomeStatus",
    "ResilienceProfile",
    "ResilientActionRunner",
    "RunnerOptions",
]
