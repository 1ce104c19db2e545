# -*- coding: utf-8 -*-
"""Load the agent served by ``agent-responses serve``."""

import importlib
import importlib.util
import os
import sys
from pathlib import Path
from typing import Any, Optional, Tuple

from agent_responses_runtime.engine.agents.base_agent import Agent

# Names looked up when SOURCE does not name an attribute
DEFAULT_ATTRIBUTES = ("agent", "create_agent", "get_agent")


class AgentLoadError(Exception):
    """Raised when agent loading fails."""


def split_source(source: str) -> Tuple[str, Optional[str]]:
    """
    Split ``module:attr`` or ``path/to/file.py[:attr]`` into its parts.

    Windows drive letters (``C:\\agents\\x.py``) are not split.
    """
    target, sep, attribute = source.rpartition(":")
    if not sep or not target or os.sep in attribute or "/" in attribute:
        return source, None
    if len(target) == 1 and target.isalpha():
        return source, None
    return target, attribute or None


class AgentLoader:
    """Load an ``Agent`` from a module path or a Python file."""

    def load(self, source: str) -> Agent:
        """
        Load the agent named by ``source``.

        Args:
            source: ``module:attribute`` or ``path/to/file.py[:attribute]``

        Returns:
            Agent instance

        Raises:
            AgentLoadError: If loading fails
        """
        target, attribute = split_source(source)
        if target.endswith(".py"):
            module = self._load_file(target)
        else:
            try:
                module = importlib.import_module(target)
            except ImportError as e:
                raise AgentLoadError(
                    f"Cannot import module '{target}': {e}",
                ) from e
        return self._resolve(module, attribute, source)

    def _load_file(self, file_path: str) -> Any:
        if not os.path.isfile(file_path):
            raise AgentLoadError(f"File not found: {file_path}")

        abs_path = os.path.abspath(file_path)
        spec = importlib.util.spec_from_file_location(
            "agent_module",
            abs_path,
        )
        if spec is None or spec.loader is None:
            raise AgentLoadError(f"Cannot load module from {abs_path}")
        module = importlib.util.module_from_spec(spec)

        # Add parent directory to sys.path temporarily
        parent_dir = str(Path(abs_path).parent)
        remove_from_path = parent_dir not in sys.path
        if remove_from_path:
            sys.path.insert(0, parent_dir)
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            raise AgentLoadError(
                f"Failed to load agent from {abs_path}: {e}",
            ) from e
        finally:
            if remove_from_path:
                sys.path.remove(parent_dir)
        return module

    def _resolve(
        self,
        module: Any,
        attribute: Optional[str],
        source: str,
    ) -> Agent:
        names = (attribute,) if attribute else DEFAULT_ATTRIBUTES
        for name in names:
            if not hasattr(module, name):
                continue
            value = getattr(module, name)
            if isinstance(value, Agent):
                return value
            if callable(value):
                result = value()
                if isinstance(result, Agent):
                    return result
                raise AgentLoadError(
                    f"'{name}' in {source} returned "
                    f"{type(result).__name__}, expected an Agent",
                )
            raise AgentLoadError(
                f"'{name}' in {source} is {type(value).__name__}, "
                f"expected an Agent or a factory",
            )
        raise AgentLoadError(
            f"No agent found in {source}.\n"
            f"Expected one of: {', '.join(names)}",
        )
