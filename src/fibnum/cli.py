# src/fibnum/cli.py

"""
fibnum - big-integer Fibonacci numbers by fast doubling

Description:
    Prints F(n) for a non-negative index n, computed with a sign-magnitude
    64-bit-limb big integer and rendered to decimal by double dabble.
    The bench command drives the file-like Fibonacci device over a range of
    indices and records per-read timings.

usage: see fibnum -h
"""

from __future__ import annotations

import argparse
import faulthandler
import sys
import textwrap
import traceback

from colorama import Fore, Style
from colorama import init as colorama_init

from fibnum import __version__ as _ver
from fibnum.bench import run_benchmark, summarize
from fibnum.config import load_settings
from fibnum.device import DeviceError, FibDevice
from fibnum.fib import fibonacci
from fibnum.render import to_string
from fibnum.runtime import APPLY, CFG, debug, ensure_runtime_deps
from fibnum.runtime import current as _rt_current
from fibnum.utility import BigNumError, UserInputError, flatten_dotted, parse_index, typename
from fibnum.workspace import resolve_output_path, settings_path, workspace_dir


def _install_loud_error_handlers(debug_on: bool) -> None:
    if not debug_on:
        return
    try:
        faulthandler.enable()
    except (OSError, ValueError):
        pass  # stderr has no file descriptor (captured or redirected in-process)

    def _excepthook(exc_type, exc, tb):
        sys.stderr.write("\n[UNCAUGHT EXCEPTION]\n")
        traceback.print_exception(exc_type, exc, tb, file=sys.stderr)
        sys.stderr.flush()
    sys.excepthook = _excepthook


def _print_user_error(msg: str) -> None:
    """Uniform, one-line friendly error."""
    prefix = f"{Fore.RED}Error:{Style.RESET_ALL}"
    if not (msg.startswith("Invalid input:") or msg.startswith("Error:")):
        msg = f"{prefix} {msg}"
    print(msg, file=sys.stderr)


# ---- argparse ----
def _build_parser() -> argparse.ArgumentParser:

    epilog = textwrap.dedent("""\
    commands:
      <n>
          Print the n-th Fibonacci number (F(0) = 0, F(1) = 1).

      bench
          Read F(0)..F(--max) from the Fibonacci device, print each value and
          write "<i> <device ns> <user ns> <overhead ns>" lines to --output.

      where
          Show the workspace and settings file paths.
    """)

    p = argparse.ArgumentParser(
        prog="fibnum",
        description="fibnum — big-integer Fibonacci numbers by fast doubling",
        usage=(
            "fibnum <n> [--verify] [--config FILE] [--debug]\n"
            "       fibnum bench [--max N] [--output FILE] [--buffer-size B] [--quiet]\n"
            "       fibnum where\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )
    p.add_argument("items", nargs="*", metavar="command|n", help="an index n, or 'bench' / 'where'")
    p.add_argument("--config", default=None, help="Settings file (default: <workspace>/fibnum.toml)")
    p.add_argument("--verify", action="store_true", help="Cross-check the result against gmpy2 and sympy")
    p.add_argument("--max", type=int, default=None, help="bench: highest index to read")
    p.add_argument("--output", default=None, help="bench: timing data file")
    p.add_argument("--buffer-size", type=int, default=None, help="bench: bytes requested per read")
    p.add_argument("--quiet", action="store_true", help="bench: do not echo the values")
    p.add_argument("--debug", action="store_true", help="Show settings, timings and full tracebacks")
    p.add_argument("--version", action="version", version=f"%(prog)s {_ver}")

    return p


def main(argv=None) -> int:
    """Thin wrapper: catch friendly errors, hide tracebacks unless debug."""
    try:
        return _main_impl(argv)
    except UserInputError as e:
        _print_user_error(str(e))
        return 2
    except (BigNumError, DeviceError) as e:
        _print_user_error(f"{e.__class__.__name__}: {e}")
        return 1
    except KeyboardInterrupt:
        print("Aborted by user.", file=sys.stderr)
        return 130
    except Exception as e:
        debug_on = ("--debug" in (argv if argv is not None else sys.argv))
        if debug_on:
            raise
        print(f"Unexpected error: {e.__class__.__name__}: {e}", file=sys.stderr)
        print("Run with --debug for a full traceback.", file=sys.stderr)
        return 1


def _print_settings() -> None:
    rt = _rt_current()
    print(f"[debug] settings source: {rt.source}", file=sys.stderr)
    flat = flatten_dotted(rt.settings)
    for k in sorted(flat.keys(), key=str.lower):
        v = flat[k]
        print(f"        {k:.<30} {v!r} ({typename(v)})", file=sys.stderr)
    print(file=sys.stderr)


def _cmd_number(n: int, *, verify: bool) -> int:
    if verify:
        if not ensure_runtime_deps(strict=True):
            return 1
        from fibnum.verify import check

        res = check(n)
        print(res.value)
        if res.ok:
            print(f"{Fore.GREEN}verified{Style.RESET_ALL} against gmpy2 and sympy", file=sys.stderr)
            return 0
        failed = [name for name, ok in (("gmpy2", res.ok_gmpy2), ("sympy", res.ok_sympy)) if not ok]
        print(f"{Fore.RED}MISMATCH{Style.RESET_ALL} against {', '.join(failed)}", file=sys.stderr)
        return 1

    bn = fibonacci(n)
    try:
        debug(f"F({n}): {bn.size} limb(s), capacity {bn.capacity}")
        print(to_string(bn))
    finally:
        bn.release()
    return 0


def _cmd_bench(args) -> int:
    max_offset = args.max if args.max is not None else int(CFG("BENCH.MAX_OFFSET", 1000))
    buffer_size = args.buffer_size if args.buffer_size is not None else int(CFG("DEVICE.BUFFER_SIZE", 500))
    if max_offset < 0:
        raise UserInputError("Invalid input: --max must be non-negative.")
    if buffer_size < 1:
        raise UserInputError("Invalid input: --buffer-size must be at least 1.")

    try:
        out = resolve_output_path(args.output or CFG("BENCH.OUTPUT_FILE", "data.txt"))
    except ValueError as e:
        raise UserInputError(f"--output: {e}") from None

    # the device clamps positions, so let it reach the requested range
    device_max = max(max_offset, int(CFG("DEVICE.MAX_OFFSET", 1000)))
    echo = None if args.quiet else print
    with FibDevice(max_offset=device_max) as dev:
        samples = run_benchmark(dev, max_offset, buffer_size, out, echo=echo)

    stats = summarize(samples)
    if not args.quiet:
        print(
            f"{Fore.YELLOW}{Style.BRIGHT}{stats['count']} reads{Style.RESET_ALL}, "
            f"mean device {stats['mean_device_ns']:.0f} ns, "
            f"mean user {stats['mean_user_ns']:.0f} ns -> {out}"
        )
    return 0


# ---- main ----
def _main_impl(argv=None) -> int:

    colorama_init(autoreset=True)

    parser = _build_parser()
    args = parser.parse_args(argv)

    settings = load_settings(args.config)
    APPLY(settings)
    rt = _rt_current()
    if args.debug:
        rt.debug = True

    _install_loud_error_handlers(rt.debug)
    if rt.debug:
        _print_settings()

    if not args.items:
        parser.print_usage(sys.stderr)
        return 2

    cmd = args.items[0]
    if cmd == "where":
        print(f"Workspace: {workspace_dir()}")
        print(f"Settings:  {settings_path()}")
        return 0

    if cmd == "bench":
        return _cmd_bench(args)

    if len(args.items) > 1:
        raise UserInputError(f"Invalid input: unexpected argument '{args.items[1]}'.")
    return _cmd_number(parse_index(cmd), verify=args.verify)


if __name__ == "__main__":
    raise SystemExit(main())
