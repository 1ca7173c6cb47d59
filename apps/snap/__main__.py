from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Final

from adapters.time import SystemSleeperPort
from domain.errors import SnapError
from pydantic import ValidationError
from shared.config.loader import load_snap_settings
from shared.contracts.v1.report import SnapReport

from apps.snap.compose import build_service
from apps.snap.settings import SnapSettings

LOG: Final = logging.getLogger("rmsnap")

EXIT_OK: Final = 0
EXIT_CAPTURE_FAILED: Final = 1
EXIT_USAGE: Final = 2


def _parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="rm-snap",
        description="Capture the reMarkable screen and crop it to the handwriting.",
    )
    ap.add_argument("-I", "--ip-address", dest="host", help="IP address of the tablet.")
    ap.add_argument("-d", "--directory", dest="output_dir", help="Directory for output files.")
    ap.add_argument("--profile", help="Config profile name (configs/profiles/<name>.toml).")
    ap.add_argument("--decoder", choices=["ffmpeg", "numpy"], help="Raw frame decoder.")
    ap.add_argument("--no-full", action="store_true", help="Do not keep the uncropped image.")
    ap.add_argument("--retries", type=int, help="Rerun the whole capture this many times on failure.")
    ap.add_argument("--json", action="store_true", help="Print the run report as JSON.")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    ap.add_argument("--quiet", action="store_true", help="Warnings and errors only.")
    return ap


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if args.host:
        out["host"] = args.host
    if args.output_dir:
        out["output_dir"] = args.output_dir
    if args.decoder:
        out["decode"] = {"adapter": args.decoder}
    if args.no_full:
        out["keep_full"] = False
    if args.retries is not None:
        out["retries"] = args.retries
    return out


def run_with_retries(settings: SnapSettings, sleeper=None, **ports: Any) -> SnapReport:
    """Run the pipeline; on SnapError start over from scratch up to ``retries`` times."""
    sleeper = sleeper or SystemSleeperPort()
    attempts = settings.retries + 1
    for attempt in range(1, attempts + 1):
        service = build_service(settings, **ports)
        try:
            return service.run()
        except SnapError as ex:
            if attempt == attempts:
                raise
            LOG.warning("Capture attempt %d/%d failed: %s", attempt, attempts, ex)
            sleeper.sleep(settings.retry_delay_s)
        finally:
            service.remote.close()
    raise AssertionError("unreachable")


def main(argv: list[str] | None = None) -> int:
    args = _parser().parse_args(argv)
    level = logging.DEBUG if args.verbose else logging.WARNING if args.quiet else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        settings = load_snap_settings(profile=args.profile, overrides=_overrides(args))
    except (RuntimeError, ValidationError) as ex:
        LOG.error("Invalid configuration: %s", ex)
        return EXIT_USAGE

    try:
        settings.output_dir.mkdir(parents=True, exist_ok=True)
        report = run_with_retries(settings)
    except SnapError as ex:
        LOG.error("%s: %s", type(ex).__name__, ex)
        return EXIT_CAPTURE_FAILED
    except OSError as ex:
        LOG.error("Could not write output: %s", ex)
        return EXIT_CAPTURE_FAILED

    if args.json:
        print(report.model_dump_json())
    elif report.cropped_path:
        print(report.cropped_path)
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
