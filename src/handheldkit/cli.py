"""Command-line interface for handheldkit.

Provides one sub-command per provisioning tool: console asset selection,
SSH over OTG bring-up/teardown, and the ADC key monitor.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import signal
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="handheldkit",
        description="Provisioning tools for handheld retro gaming consoles",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/handheldkit.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    dtb_parser = subparsers.add_parser(
        "dtb-select",
        help="Pick a console model and copy its device tree and logo",
    )
    dtb_parser.add_argument(
        "--model", type=str, default=None,
        help="Console directory or menu name; skips the interactive menu",
    )
    dtb_parser.add_argument("--consoles-dir", type=Path, default=None)
    dtb_parser.add_argument("--target-dir", type=Path, default=None)

    otg_parser = subparsers.add_parser("otg-ssh", help="Expose SSH over the USB-OTG port")
    otg_parser.add_argument(
        "--no-dialog", action="store_true",
        help="Log connection details instead of showing a dialog; run until interrupted",
    )
    subparsers.add_parser("otg-stop", help="Tear down a leftover OTG session")

    adc_parser = subparsers.add_parser("adc-keys", help="Run the ADC gamepad key monitor")
    adc_parser.add_argument("--device", type=str, default=None, help="evdev device to grab")
    adc_parser.add_argument(
        "--force", action="store_true",
        help="Run even if the device model does not match",
    )

    return parser.parse_args(argv)


def _dtb_select(settings, args) -> int:
    from handheldkit.dtb import ConsoleSelector, find_option, install, options_from_config
    from handheldkit.errors import ProvisioningError

    cfg = settings.dtb
    options = options_from_config(cfg.consoles)

    if args.model:
        selected = find_option(options, args.model)
        if selected is None:
            print(f"Unknown console model: {args.model}")
            return EXIT_FAILURE
    else:
        print(f"DTB Selector ({cfg.title} only)")
        print("Copies consoles/<model> and its logo directory, then creates the language marker.")
        print()
        selector = ConsoleSelector(options, title=cfg.title)
        try:
            selected = selector.select()
        except EOFError:
            print("Error: input closed")
            return EXIT_FAILURE
        if selected is None:
            print("Exited.")
            return EXIT_OK

    try:
        report = install(
            selected,
            consoles_dir=args.consoles_dir or cfg.consoles_dir,
            target_dir=args.target_dir or cfg.target_dir,
            marker=cfg.marker_file,
        )
    except ProvisioningError as e:
        print(f"Failed: {e}")
        return EXIT_FAILURE

    logo = selected.logo if report.logo_copied else "skipped"
    print(
        f"Done! Installed {selected.display} (consoles/{selected.real}) + LOGO({logo}), "
        f"{report.files_copied} files"
    )
    return EXIT_OK


def _ensure_root(argv: list[str]) -> None:
    """Re-run this command under sudo when not already root."""
    if os.geteuid() == 0:
        return
    from handheldkit.config.settings import ENV_PREFIX

    logger.info("Root required, re-executing with sudo")
    command = ["sudo"]
    # sudo resets the environment; keep our overrides
    overrides = sorted(name for name in os.environ if name.startswith(ENV_PREFIX))
    if overrides:
        command.append("--preserve-env=" + ",".join(overrides))
    os.execvp("sudo", [*command, sys.executable, "-m", "handheldkit", *argv])


async def _run_cancellable(coro) -> int:
    """Run a coroutine, turning SIGTERM/SIGINT into cancellation."""
    loop = asyncio.get_running_loop()
    task = asyncio.ensure_future(coro)
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, task.cancel)
    try:
        result = await task
    except asyncio.CancelledError:
        logger.info("Interrupted")
        return EXIT_INTERRUPTED
    finally:
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.remove_signal_handler(sig)
    return result


async def _otg_ssh(settings, args) -> int:
    from handheldkit.otg import OtgSession

    session = OtgSession(settings.otg, show_dialog=not args.no_dialog)
    report = await session.run()
    for step, ok in report.steps.items():
        logger.info("%-8s %s", step, "ok" if ok else "FAILED")
    return EXIT_OK if report.succeeded else EXIT_FAILURE


async def _otg_stop(settings) -> int:
    from handheldkit.otg import OtgSession

    await OtgSession(settings.otg, show_dialog=False).cleanup()
    return EXIT_OK


async def _adc_keys(settings, args) -> int:
    from handheldkit.adckeys import AdcKeyMonitor, KeyMap, is_supported_model, read_model

    cfg = settings.adc_keys
    model = read_model(cfg.model_path)
    if not args.force and not is_supported_model(model, cfg.model_pattern):
        logger.info("Device model %r does not need ADC key remapping", model.strip())
        return EXIT_OK

    monitor = AdcKeyMonitor(
        keymap=KeyMap(cfg.bindings),
        device=args.device or cfg.device,
        helper_command=cfg.helper_command,
        restart_delay=cfg.restart_delay,
    )
    await monitor.run()
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the handheldkit CLI."""
    raw_argv = list(sys.argv[1:] if argv is None else argv)
    args = parse_args(raw_argv)

    if args.command is None:
        parse_args(["--help"])
        return EXIT_OK

    from handheldkit.config.settings import load_settings
    from handheldkit.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    if args.command == "dtb-select":
        return _dtb_select(settings, args)

    if args.command == "otg-ssh":
        _ensure_root(raw_argv)
        logger.info("Starting SSH over OTG session")
        return asyncio.run(_run_cancellable(_otg_ssh(settings, args)))

    if args.command == "otg-stop":
        _ensure_root(raw_argv)
        return asyncio.run(_otg_stop(settings))

    if args.command == "adc-keys":
        logger.info("Starting ADC key monitor")
        return asyncio.run(_run_cancellable(_adc_keys(settings, args)))

    return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
