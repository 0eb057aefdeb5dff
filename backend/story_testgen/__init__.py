"""
Story Test Case Generator: turns user stories into structured test cases
with an LLM. Layout: api/, core/, schemas/, services/, providers/, utils/,
client/.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
