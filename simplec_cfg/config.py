"""
simplec_cfg.config
==================

Run-time options of the CFG builder.  There are no configuration files;
everything comes from the command line.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Optional


class OutputFormat(enum.Enum):
    TEXT = "text"
    DOT = "dot"


_VERBOSITY_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


@dataclass(frozen=True)
class CfgConfig:
    """Options for one invocation.

    Attributes
    ----------
    output_format : OutputFormat
        Canonical text listing (default) or Graphviz DOT.
    output_path : str or None
        Destination file; ``None`` or ``"-"`` writes to stdout.
    verbosity : int
        0 = warnings only, 1 = info, 2 or more = debug.
    """

    output_format: OutputFormat = OutputFormat.TEXT
    output_path: Optional[str] = None
    verbosity: int = 0

    @property
    def writes_stdout(self) -> bool:
        return self.output_path in (None, "-")

    @property
    def log_level(self) -> int:
        return _VERBOSITY_LEVELS[min(max(self.verbosity, 0), len(_VERBOSITY_LEVELS) - 1)]

    @classmethod
    def from_args(cls, args: Any) -> "CfgConfig":
        """Build a config from an ``argparse.Namespace``."""
        return cls(
            output_format=OutputFormat(getattr(args, "format", None) or OutputFormat.TEXT.value),
            output_path=getattr(args, "output", None),
            verbosity=getattr(args, "verbose", 0) or 0,
        )


__all__ = ["OutputFormat", "CfgConfig"]
