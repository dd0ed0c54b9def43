"""
Explode a MIME multipart message into one file per leaf part.

Input: a message file, or stdin when none is given
Output: decoded parts in --out, a short report on stdout

Exit status: 0 clean run, 1 some parts or branches failed,
2 the message is not a multipart MIME message.
"""

import argparse
import sys

from mimeburst.errors import UnclassifiableMessage
from mimeburst.explode.message import display_headers, explode_message
from mimeburst.utils.config import CONFIG, depth_ceiling
from mimeburst.utils.logging_utils import configure_logging

EXIT_OK = 0
EXIT_PARTIAL = 1
EXIT_FATAL = 2


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="mimeburst", description=__doc__.strip().splitlines()[0])
    ap.add_argument("message", nargs="?", help="message file (default: stdin)")
    ap.add_argument("--out", default=CONFIG.OUTPUT_DIR, help="directory for the decoded parts")
    ap.add_argument("--max-depth", type=int, default=CONFIG.MAX_DEPTH)
    ap.add_argument(
        "--strict-multipart",
        action="store_true",
        help="report multipart parts without a boundary as failures instead of writing them",
    )
    ap.add_argument("--log-dir", default=None, help="also log to a rotating file in this directory")
    ap.add_argument("-v", "--verbose", action="store_true", help="trace the part tree")
    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(log_dir=args.log_dir, level="DEBUG" if args.verbose else CONFIG.LOG_LEVEL)

    if args.max_depth < 1 or args.max_depth > depth_ceiling():
        print(f"[!] --max-depth must be between 1 and {depth_ceiling()}", file=sys.stderr)
        return EXIT_FATAL

    downgrade = CONFIG.DOWNGRADE_BOUNDARYLESS_MULTIPART and not args.strict_multipart

    try:
        if args.message:
            with open(args.message, "rb") as f:
                message, summary = explode_message(
                    f, args.out, max_depth=args.max_depth, downgrade_boundaryless=downgrade
                )
        else:
            message, summary = explode_message(
                sys.stdin.buffer, args.out, max_depth=args.max_depth, downgrade_boundaryless=downgrade
            )
    except UnclassifiableMessage as e:
        print(f"[!] {e}", file=sys.stderr)
        return EXIT_FATAL
    except OSError as e:
        print(f"[!] cannot read message: {e}", file=sys.stderr)
        return EXIT_FATAL

    for name, value in display_headers(message.header).items():
        print(f"{name}: {value}")
    print()

    for name in summary.written:
        print(f"[✅] {name}")
    print(
        f"{summary.files_written} file(s) written, {summary.parts_failed} part(s) failed, "
        f"{summary.branches_aborted} branch(es) aborted"
    )

    return EXIT_OK if summary.ok else EXIT_PARTIAL


if __name__ == "__main__":
    sys.exit(main())
