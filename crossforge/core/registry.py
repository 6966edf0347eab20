"""Target Descriptor Registry: ordered, filterable view over the build matrix."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from fnmatch import fnmatchcase

from crossforge.models.targets import DEFAULT_TARGETS, TargetDescriptor


def _parse_filter(platform_filter: str | Iterable[str] | None) -> list[str]:
    if platform_filter is None:
        return []
    if isinstance(platform_filter, str):
        tokens = platform_filter.split(",")
    else:
        tokens = list(platform_filter)
    return [t.strip().lower() for t in tokens if t and t.strip()]


def matches(target: TargetDescriptor, token: str) -> bool:
    """Whether a single filter token selects *target*.

    A token matches the OS name, the arch name, the exact triple, or a
    glob pattern over the triple (``*-musl``).
    """
    return (
        token == target.os.value
        or token == target.arch.value
        or token == target.triple
        or fnmatchcase(target.triple, token)
    )


class TargetRegistry:
    """Static registry of build targets.

    Parameters
    ----------
    targets:
        The ordered matrix. Defaults to ``DEFAULT_TARGETS``.
    """

    def __init__(self, targets: Sequence[TargetDescriptor] | None = None) -> None:
        self._targets: tuple[TargetDescriptor, ...] = tuple(
            DEFAULT_TARGETS if targets is None else targets
        )
        triples = [t.triple for t in self._targets]
        if len(set(triples)) != len(triples):
            raise ValueError(f"Duplicate target triples in registry: {triples}")

    def list_targets(
        self,
        platform_filter: str | Iterable[str] | None = None,
        *,
        include_disabled: bool = False,
    ) -> list[TargetDescriptor]:
        """Return targets in registry (build) order.

        Disabled entries are skipped unless *include_disabled* is set.
        """
        tokens = _parse_filter(platform_filter)
        selected: list[TargetDescriptor] = []
        for target in self._targets:
            if not target.enabled and not include_disabled:
                continue
            if tokens and not any(matches(target, tok) for tok in tokens):
                continue
            selected.append(target)
        return selected

    def get(self, triple: str) -> TargetDescriptor:
        """Look up a target by triple, enabled or not."""
        for target in self._targets:
            if target.triple == triple:
                return target
        raise KeyError(
            f"Unknown target {triple!r}. "
            f"Registered targets: {[t.triple for t in self._targets]}"
        )

    def __len__(self) -> int:
        return len(self._targets)
