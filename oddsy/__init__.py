"""
Oddsy - tool-calling sports betting analyst

This package provides:
- Tool registry with The Odds API, API-Sports and Tavily executors
- A bounded function-calling orchestration loop
- FastAPI server and command-line client
"""

__version__ = "0.1.0"

from .agent import run_agent
from .llm_call import LLMClient

__all__ = [
    "LLMClient",
    "run_agent",
]
