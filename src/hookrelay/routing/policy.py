"""Routing policy — decides whether an event is forwarded and where to."""

from __future__ import annotations

from hookrelay.core.logging import get_logger
from hookrelay.core.models import EventKind, RouteDecision, RoutingConfig
from hookrelay.routing.patterns import is_branch_allowed

logger = get_logger(__name__)


def resolve_destination(config: RoutingConfig, repository: str) -> str:
    """Pick the destination channel for a repository.

    Order: rule-level override, then the repository destination map,
    then the configured default.
    """
    rule = config.rule_for(repository)
    if rule is not None and rule.destination_override:
        return rule.destination_override

    mapped = config.repository_destinations.get(repository)
    if mapped:
        return mapped

    return config.default_destination


class RoutingPolicy:
    """Opt-in routing over a single configuration snapshot."""

    def __init__(self, config: RoutingConfig) -> None:
        self._config = config

    def route(
        self,
        repository: str,
        event_kind: EventKind | str,
        branch: str | None = None,
    ) -> RouteDecision:
        destination = resolve_destination(self._config, repository)

        rule = self._config.rule_for(repository)
        if rule is None:
            return RouteDecision(
                should_notify=False,
                destination=destination,
                reason="repository not configured",
            )

        if event_kind not in rule.allowed_event_kinds:
            return RouteDecision(
                should_notify=False,
                destination=destination,
                reason=f"event {event_kind} not enabled",
            )

        if branch is not None and not is_branch_allowed(branch, rule):
            return RouteDecision(
                should_notify=False,
                destination=destination,
                reason=f"branch {branch} not allowed",
            )

        return RouteDecision(should_notify=True, destination=destination)
