"""
Webhook server generation.

- statements.py: statement IR and the single textual back-end
- events.py / replies.py / actions.py / controls.py: per-kind lowering tables
- flex.py: Flex Message factory functions
- webhook.py: ``WebhookGenerator`` and the ``generate()`` entry point
"""

from .actions import ACTION_LOWERINGS, lower_action, lower_actions
from .context import FlexFactory, LoweringContext
from .controls import CONTROL_LOWERINGS, condition_expression
from .events import EVENT_SPECS, EventSpec, event_guard
from .flex import build_factories, factory_name
from .replies import REPLY_LOWERINGS, TEMPLATE_BUILDERS
from .result import GeneratorResult
from .statements import render, source_literal
from .webhook import WebhookGenerator, generate, generate_result

__all__ = [
    "ACTION_LOWERINGS",
    "CONTROL_LOWERINGS",
    "EVENT_SPECS",
    "REPLY_LOWERINGS",
    "TEMPLATE_BUILDERS",
    "EventSpec",
    "FlexFactory",
    "GeneratorResult",
    "LoweringContext",
    "WebhookGenerator",
    "build_factories",
    "condition_expression",
    "event_guard",
    "factory_name",
    "generate",
    "generate_result",
    "lower_action",
    "lower_actions",
    "render",
    "source_literal",
]
