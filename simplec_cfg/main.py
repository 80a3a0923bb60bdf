#!/usr/bin/env python3
"""simplec_cfg/main.py: CLI entry-point for the CFG builder.

Usage examples
--------------
    # Print the pruned CFGs of every function
    simplec-cfg prog.c

    # Graphviz output into a file
    simplec-cfg prog.c -f dot -o prog.dot

    # Debug logging of block creation and pruning
    python -m simplec_cfg -vv prog.c

Exit codes
----------
    0   Success (also when no input file is given; the usage line is printed).
    1   The input is not a valid program, or the graph could not be built.
    2   Infrastructure failure (unreadable or non-UTF-8 input, unwritable output).
"""

from __future__ import annotations

import argparse
import logging
import sys
import textwrap
from pathlib import Path
from typing import Optional, Sequence, TextIO

from . import __version__
from .config import CfgConfig, OutputFormat
from .driver import translate
from .errors import CfgError

_log = logging.getLogger("simplec_cfg")

# Exit codes ----------------------------------------------------------------

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2
EXIT_INTERRUPTED: int = 130

USAGE_LINE = "    [Usage]\tsimplec-cfg <input.c>"

_HANDLER_NAME = "simplec_cfg.cli"


# ===========================================================================
# Utility helpers
# ===========================================================================

def _configure_logging(verbosity: int) -> None:
    """Set up the ``simplec_cfg`` logger.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = CfgConfig(verbosity=verbosity).log_level

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("simplec_cfg")
    for old in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(old)
    root.setLevel(level)
    root.addHandler(handler)


def _open_output(dest: Optional[str]) -> TextIO:
    """Return a writable text stream.

    *dest* ``None`` or ``"-"`` → ``sys.stdout``; otherwise open the path
    for writing (creating parent directories as needed).
    """
    if dest is None or dest == "-":
        return sys.stdout
    p = Path(dest).expanduser().resolve()
    p.parent.mkdir(parents=True, exist_ok=True)
    return open(p, "w", encoding="utf-8")


# ===========================================================================
# Argument parser
# ===========================================================================

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="simplec-cfg",
        description="Build, prune and print the control flow graphs of a simple-C program.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              simplec-cfg prog.c
              simplec-cfg prog.c -f dot -o prog.dot
        """),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )
    parser.add_argument(
        "-o", "--output",
        default=None,
        metavar="FILE",
        help='Output file ("-" or omit for stdout).',
    )
    parser.add_argument(
        "-f", "--format",
        choices=[fmt.value for fmt in OutputFormat],
        default=OutputFormat.TEXT.value,
        help="Output format (default: %(default)s).",
    )
    parser.add_argument(
        "input",
        nargs="?",
        default=None,
        help="simple-C source file.",
    )
    return parser


# ===========================================================================
# Main
# ===========================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the CLI.

    Parameters
    ----------
    argv:
        Command-line arguments.  ``None`` → ``sys.argv[1:]``.

    Returns
    -------
    int
        Exit code (see module docstring for semantics).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    if args.input is None:
        print(USAGE_LINE)
        return EXIT_OK

    config = CfgConfig.from_args(args)

    try:
        source = Path(args.input).read_text(encoding="utf-8")
        _log.info("read %s (%d bytes)", args.input, len(source))

        output = translate(source, args.input, config)

        stream = _open_output(config.output_path)
        try:
            stream.write(output)
        finally:
            if stream is not sys.stdout:
                stream.close()
        if not config.writes_stdout:
            _log.info("wrote %s", config.output_path)
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return EXIT_INTERRUPTED
    except CfgError as exc:
        print(exc.to_gcc_format(), file=sys.stderr)
        return EXIT_ERROR
    except UnicodeDecodeError:
        print(f"simplec-cfg: {args.input}: not UTF-8 text", file=sys.stderr)
        return EXIT_INFRA
    except OSError as exc:
        print(f"simplec-cfg: {exc}", file=sys.stderr)
        return EXIT_INFRA

    return EXIT_OK


# ---------------------------------------------------------------------------
# Module execution support
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    raise SystemExit(main())
