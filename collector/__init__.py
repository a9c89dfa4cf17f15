"""collector - An experiment engine for procedure-driven behavioral studies.

Compiles tabular procedure and stimuli files into an ordered trial sequence,
navigates participants through it, and delivers their responses to a server.
"""

from __future__ import annotations

__version__ = "0.1.0"
