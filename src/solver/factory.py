"""
Strategy Registry - Named solving strategies and the options they accept.

Each registered strategy is recorded with the keyword options its
constructor takes, so callers (the CLI, the worker, saved settings) can
list them and pass options by name without knowing the class.
"""

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type

from .base import SolverStrategy

logger = logging.getLogger(__name__)


DEFAULT_STRATEGY = "dfs"


@dataclass
class StrategyEntry:
    """
    Registered strategy.

    Attributes:
        cls: Strategy class
        options: Constructor option names mapped to their defaults
    """
    cls: Type[SolverStrategy]
    options: Dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.cls.name

    @property
    def description(self) -> str:
        return self.cls.description

    def build(self, options: Dict[str, Any]) -> SolverStrategy:
        unknown = sorted(set(options) - set(self.options))
        if unknown:
            raise ValueError(
                f"Strategy {self.name} does not accept: {', '.join(unknown)}"
            )
        return self.cls(**options)


_REGISTRY: Dict[str, StrategyEntry] = {}


def _constructor_options(cls: Type[SolverStrategy]) -> Dict[str, Any]:
    """Keyword options of cls.__init__ with their defaults (None when required)."""
    if cls.__init__ is object.__init__:
        return {}
    options = {}
    for param in inspect.signature(cls.__init__).parameters.values():
        if param.name == "self" or param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        options[param.name] = None if param.default is param.empty else param.default
    return options


def register_strategy(cls: Type[SolverStrategy]) -> Type[SolverStrategy]:
    """
    Class decorator adding a strategy to the registry under cls.name.

    Usage:
        @register_strategy
        class BreadthFirstStrategy(SolverStrategy):
            name = "bfs"
    """
    if cls.name in _REGISTRY:
        logger.warning(f"Strategy {cls.name} registered twice, replacing")
    _REGISTRY[cls.name] = StrategyEntry(cls, _constructor_options(cls))
    return cls


def create_strategy(name: str, **options: Any) -> SolverStrategy:
    """
    Create a strategy instance by name.

    Args:
        name: Registered strategy name ("dfs", "greedy", "random")
        **options: Constructor options, e.g. max_tries=5 for "random"

    Returns:
        Strategy instance

    Raises:
        ValueError: If the name is unknown or an option is not accepted
    """
    entry = _REGISTRY.get(name)
    if entry is None:
        available = ", ".join(_REGISTRY)
        raise ValueError(f"Unknown strategy: {name}. Available: {available}")
    return entry.build(options)


def get_strategy_names() -> List[str]:
    return list(_REGISTRY)


def get_strategy_info() -> List[Dict[str, Any]]:
    """
    Describe every registered strategy.

    Returns:
        List of dicts with 'name', 'description' and 'options'
        (option name -> default value)
    """
    return [
        {"name": e.name, "description": e.description, "options": dict(e.options)}
        for e in _REGISTRY.values()
    ]


def get_default_strategy_name() -> str:
    """"dfs" if registered, else the first registered name ("" if none)."""
    if DEFAULT_STRATEGY in _REGISTRY:
        return DEFAULT_STRATEGY
    return next(iter(_REGISTRY), "")


def resolve_strategy_name(name: Optional[str]) -> str:
    """
    Map a possibly stale name (e.g. from config.json) to a registered one.

    Unknown or empty names fall back to the default strategy.
    """
    if name in _REGISTRY:
        return name
    default = get_default_strategy_name()
    if name:
        logger.warning(f"Unknown strategy {name!r}, using {default}")
    return default
