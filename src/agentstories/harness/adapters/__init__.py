"""
Built-in harness adapters.

Each adapter targets one agent runtime. Use
``agentstories.harness.create_default_registry`` to get all of them.
"""

from agentstories.harness.adapters.claude import ClaudeAdapter
from agentstories.harness.adapters.crewai import CrewAIAdapter
from agentstories.harness.adapters.langgraph import LangGraphAdapter
from agentstories.harness.adapters.letta import LettaAdapter

__all__ = ["ClaudeAdapter", "CrewAIAdapter", "LangGraphAdapter", "LettaAdapter"]
