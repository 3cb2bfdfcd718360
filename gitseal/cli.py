"""
Command-line interface for git-seal.

This module wires the key store, cipher engine and Git integration
into the user-facing commands:
- keygen
- setup
- track
- clean
- smudge
- help
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import BinaryIO, List, Optional, TextIO

from .config import ATTRIBUTES_FILE, TOOL_VERSION, SealConfig, load_config
from .errors import SealError
from .filters import clean, smudge
from .gitconfig import attributes_line, executable_command, register_filter, track
from .keystore import KeyStore
from .utils import short_hash


# ---------------------------------------------------------------------------
# Color output helpers
# ---------------------------------------------------------------------------


class Colors:
    """ANSI color codes for terminal output."""
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    RESET = "\033[0m"
    BOLD = "\033[1m"


def colored(text: str, color: str) -> str:
    """Return colored text for terminal output."""
    return f"{color}{text}{Colors.RESET}"


def print_error(msg: str) -> None:
    """Print error message to stderr."""
    print(colored(f"✗ Error: {msg}", Colors.RED), file=sys.stderr)


def print_success(msg: str) -> None:
    """Print success message."""
    print(colored(f"✓ {msg}", Colors.GREEN))


def print_warning(msg: str) -> None:
    """Print warning message."""
    print(colored(f"⚠ Warning: {msg}", Colors.YELLOW))


def print_info(msg: str) -> None:
    """Print info message."""
    print(colored(f"ℹ {msg}", Colors.CYAN))


# ---------------------------------------------------------------------------
# CLI context
# ---------------------------------------------------------------------------


class CLIContext:
    """Shared context for CLI commands."""

    def __init__(
        self,
        config: SealConfig,
        verbose: bool,
        quiet: bool,
    ):
        self.config = config
        self.verbose = verbose
        self.quiet = quiet
        # clean/smudge own stdout; they switch this to stderr
        self.out: TextIO = sys.stdout

        self._keystore: Optional[KeyStore] = None

    @property
    def keystore(self) -> KeyStore:
        if self._keystore is None:
            self._keystore = KeyStore(self.config.key_path)
        return self._keystore

    def log(self, msg: str) -> None:
        """Log message if not quiet."""
        if not self.quiet:
            print(msg, file=self.out)

    def log_verbose(self, msg: str) -> None:
        """Log message if verbose."""
        if self.verbose:
            print(colored(f"  → {msg}", Colors.BLUE), file=self.out)


def _stdin() -> BinaryIO:
    return getattr(sys.stdin, "buffer", sys.stdin)


def _stdout() -> BinaryIO:
    return getattr(sys.stdout, "buffer", sys.stdout)


# ---------------------------------------------------------------------------
# Command implementations
# ---------------------------------------------------------------------------


def cmd_keygen(ctx: CLIContext, args: argparse.Namespace) -> int:
    """
    Generate the master key.
    """
    store = ctx.keystore
    if args.force and store.exists():
        print_warning(f"Overwriting existing key at {store.path}")

    key = store.generate(overwrite=args.force)

    print_success(f"Master Key created at: {store.path}")
    ctx.log(f"  Fingerprint: {short_hash(key)}")
    print_warning("BACK UP THIS FILE IMMEDIATELY! Without it sealed files cannot be recovered.")
    return 0


def cmd_setup(ctx: CLIContext, args: argparse.Namespace) -> int:
    """
    Register the clean/smudge filter in the global Git config.
    """
    command = executable_command()
    ctx.log_verbose(f"Filter command: {command}")

    register_filter(command, ctx.config.filter_name)

    print_success(f"Git configured globally to use {ctx.config.filter_name}.")
    print_info("To use it in a repo, create .gitattributes and add:")
    ctx.log(f"   {attributes_line('.env', ctx.config.filter_name)}")
    ctx.log("   (or run: git-seal track .env)")
    return 0


def cmd_track(ctx: CLIContext, args: argparse.Namespace) -> int:
    """
    Add filter lines for the given patterns to .gitattributes.
    """
    added = track(args.patterns, args.file, ctx.config.filter_name)

    if not added:
        ctx.log(colored("All patterns already tracked", Colors.YELLOW))
        return 0

    for line in added:
        ctx.log(f"  + {line}")
    print_success(f"Updated {args.file}")

    if not ctx.keystore.exists():
        print_warning(f"No key at {ctx.keystore.path}; run 'git-seal keygen' before committing")
    return 0


def cmd_clean(ctx: CLIContext, args: argparse.Namespace) -> int:
    """
    Encrypt stdin to stdout.
    """
    ctx.out = sys.stderr
    stdout = _stdout()

    count = clean(ctx.keystore, _stdin(), stdout, ctx.config.chunk_size)
    stdout.flush()

    ctx.log_verbose(f"Sealed {count} bytes")
    return 0


def cmd_smudge(ctx: CLIContext, args: argparse.Namespace) -> int:
    """
    Decrypt stdin to stdout, passing content through if no key is available.
    """
    ctx.out = sys.stderr
    stdout = _stdout()

    decrypted = smudge(ctx.keystore, _stdin(), stdout, ctx.config.chunk_size)
    stdout.flush()

    if not decrypted:
        ctx.log_verbose(f"No usable key at {ctx.keystore.path}; content left sealed")
    return 0


def cmd_help(ctx: Optional[CLIContext], args: Optional[argparse.Namespace]) -> int:
    """
    Show help message.
    """
    help_text = f"""
{colored('git-seal', Colors.BOLD)} — transparent encryption for Git

{colored('USAGE:', Colors.CYAN)}
  git-seal [options] <command>

{colored('DESCRIPTION:', Colors.CYAN)}
  git-seal is a clean/smudge filter: files matched in .gitattributes are
  stored encrypted in the repository and appear as plaintext in your
  working tree.

  Encryption is deterministic (fixed IV) so that Git diffs and deltas
  keep working. Identical prefixes produce identical ciphertext.

{colored('COMMANDS:', Colors.CYAN)}
  keygen      Generate your master key (~/.git-seal.key)
  setup       Configure Git globally to use this tool
  track       Add patterns to .gitattributes
  clean       (Internal) Encrypt data
  smudge      (Internal) Decrypt data
  help        Show this help message

{colored('GLOBAL OPTIONS:', Colors.CYAN)}
  -k, --key-file PATH       Master key location
                            (default: ~/.git-seal.key)
  -v, --verbose             Enable verbose output
  -q, --quiet               Suppress non-error output
  -h, --help                Show this help message and exit

{colored('ENVIRONMENT:', Colors.CYAN)}
  GIT_SEAL_KEY_FILE         Master key location if --key-file is not given

{colored('EXAMPLES:', Colors.CYAN)}
  git-seal keygen
  git-seal setup
  git-seal track .env 'secrets/*'

{colored('VERSION:', Colors.CYAN)}
  {TOOL_VERSION}
"""
    print(help_text)
    return 0


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


COMMANDS = {
    "keygen": cmd_keygen,
    "setup": cmd_setup,
    "track": cmd_track,
    "clean": cmd_clean,
    "smudge": cmd_smudge,
    "help": cmd_help,
}

# global options that take a value
_VALUE_OPTIONS = {"-k", "--key-file"}

# Git may append arguments to filter commands; these ignore extras
_FILTER_COMMANDS = {"clean", "smudge"}


class UsageError(Exception):
    """Raised instead of exiting when the command line cannot be parsed."""


class ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage problems to the caller."""

    def error(self, message: str):
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = ArgumentParser(
        prog="git-seal",
        description="Transparent encryption for Git",
        add_help=False,
    )

    # Global options
    parser.add_argument(
        "-k", "--key-file",
        default=None,
        help="Master key location",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress non-error output",
    )
    parser.add_argument(
        "-h", "--help",
        action="store_true",
        help="Show help message",
    )

    # Subcommands
    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    keygen_parser = subparsers.add_parser("keygen", help="Generate the master key")
    keygen_parser.add_argument("--force", action="store_true", help="Overwrite an existing key file")

    subparsers.add_parser("setup", help="Register the filter with Git")

    track_parser = subparsers.add_parser("track", help="Add patterns to .gitattributes")
    track_parser.add_argument("patterns", nargs="+", help="Path patterns to seal")
    track_parser.add_argument("--file", default=ATTRIBUTES_FILE, type=Path, help="Attributes file to update")

    subparsers.add_parser("clean", help="Encrypt stdin to stdout")
    subparsers.add_parser("smudge", help="Decrypt stdin to stdout")
    subparsers.add_parser("help", help="Show help message")

    return parser


def find_command(argv: List[str]) -> Optional[str]:
    """Return the first positional token, skipping global options."""
    skip = False
    for token in argv:
        if skip:
            skip = False
            continue
        if token in _VALUE_OPTIONS:
            skip = True
            continue
        if token.startswith("-"):
            continue
        return token
    return None


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    if argv is None:
        argv = sys.argv[1:]

    # Missing or unknown commands are not an error
    if find_command(argv) not in COMMANDS:
        return cmd_help(None, None)

    parser = build_parser()
    try:
        args, extras = parser.parse_known_args(argv)
    except UsageError as e:
        print_warning(str(e))
        return cmd_help(None, None)

    if args.help or not args.command:
        return cmd_help(None, args)

    if extras and args.command not in _FILTER_COMMANDS:
        print_warning(f"unrecognized arguments: {' '.join(extras)}")
        return cmd_help(None, args)

    ctx = CLIContext(
        config=load_config(args.key_file),
        verbose=args.verbose,
        quiet=args.quiet,
    )

    cmd_func = COMMANDS[args.command]

    try:
        return cmd_func(ctx, args)
    except KeyboardInterrupt:
        print_error("Interrupted")
        return 130
    except SealError as e:
        print_error(str(e))
        return 1
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
