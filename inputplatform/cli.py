"""
inputplatform command-line interface.

Usage::

    inputplatform detect --touch --viewport 768x1024
    inputplatform detect --gamepad --glyph ButtonSquare --json
    inputplatform watch snapshots.jsonl
    tail -f host.log | inputplatform watch
"""

from __future__ import annotations

import json as json_mod
import logging
import threading
from typing import Optional

import click

from . import __version__
from ._types import ClassificationInput, ConsoleType, Platform
from .config import load_config
from .detector import PlatformDetector
from .host import StaticCapabilityProvider

logger = logging.getLogger(__name__)


def _parse_viewport(
    ctx: click.Context, param: click.Parameter, value: Optional[str]
) -> Optional[tuple[float, float]]:
    if value is None:
        return None
    try:
        width, height = value.lower().split("x", 1)
        return float(width), float(height)
    except ValueError:
        raise click.BadParameter("expected WIDTHxHEIGHT, e.g. 768x1024")


def _format_console_type(console_type: Optional[ConsoleType]) -> str:
    return console_type.value if console_type else "none"


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="inputplatform")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to a JSON config file.",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, config_path: Optional[str]) -> None:
    """Infer the device platform from input capabilities."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    try:
        ctx.obj = load_config(config_path)
    except (TypeError, ValueError) as exc:
        raise click.ClickException(f"Invalid config: {exc}")


# ---------------------------------------------------------------------------
# detect
# ---------------------------------------------------------------------------


@main.command()
@click.option("--vr", is_flag=True, help="VR headset active.")
@click.option("--gamepad", is_flag=True, help="Gamepad connected.")
@click.option("--ten-foot", is_flag=True, help="Ten-foot (TV) interface mode.")
@click.option("--touch", is_flag=True, help="Touchscreen available.")
@click.option("--keyboard", is_flag=True, help="Keyboard available.")
@click.option("--mouse", is_flag=True, help="Mouse available.")
@click.option("--gyroscope", is_flag=True, help="Gyroscope available.")
@click.option("--accelerometer", is_flag=True, help="Accelerometer available.")
@click.option("--glyph", default="", help="Host label for the reference gamepad button.")
@click.option(
    "--viewport",
    callback=_parse_viewport,
    default=None,
    help="Viewport size as WIDTHxHEIGHT.",
)
@click.option("--no-tablet", is_flag=True, help="Disable tablet detection.")
@click.option("--threshold", type=float, default=None, help="Tablet aspect ratio threshold.")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_obj
def detect(
    config,
    vr: bool,
    gamepad: bool,
    ten_foot: bool,
    touch: bool,
    keyboard: bool,
    mouse: bool,
    gyroscope: bool,
    accelerometer: bool,
    glyph: str,
    viewport: Optional[tuple[float, float]],
    no_tablet: bool,
    threshold: Optional[float],
    as_json: bool,
) -> None:
    """Classify a single capability snapshot."""
    if no_tablet:
        config.tablet_detection_enabled = False
    if threshold is not None:
        if threshold <= 0:
            raise click.BadParameter("must be positive", param_hint="--threshold")
        config.tablet_aspect_ratio_threshold = threshold

    provider = StaticCapabilityProvider(
        vr_enabled=vr,
        gamepad_enabled=gamepad,
        ten_foot_interface=ten_foot,
        touch_enabled=touch,
        keyboard_enabled=keyboard,
        mouse_enabled=mouse,
        gyroscope_enabled=gyroscope,
        accelerometer_enabled=accelerometer,
        console_button_glyph=glyph,
    )
    if viewport:
        provider.set_viewport(*viewport)

    detector = PlatformDetector(provider, config=config)
    platform, console_type = detector.compute()

    if as_json:
        snapshot = provider.capture()
        click.echo(
            json_mod.dumps(
                {
                    "platform": platform.value,
                    "console_type": console_type.value if console_type else None,
                    "aspect_ratio": snapshot.aspect_ratio,
                    "input": snapshot.to_dict(),
                },
                indent=2,
            )
        )
        return

    click.echo(f"Platform: {platform.value}")
    if platform == Platform.CONSOLE:
        click.echo(f"Console type: {_format_console_type(console_type)}")


# ---------------------------------------------------------------------------
# watch
# ---------------------------------------------------------------------------


@main.command()
@click.argument("source", type=click.File("r"), default="-")
@click.option("--json", "as_json", is_flag=True, help="Emit changes as JSON lines.")
@click.pass_obj
def watch(config, source, as_json: bool) -> None:
    """Feed JSON-lines capability snapshots through the detector.

    Each line is an object of capability flags (snake_case or host
    camelCase names).  Prints one line per change notification.
    """
    provider = StaticCapabilityProvider()
    detector = PlatformDetector(provider, config=config)
    pending: list[dict] = []
    pending_lock = threading.Lock()

    def _collect(payload: dict) -> None:
        with pending_lock:
            pending.append(payload)

    def _emit(payload: dict) -> None:
        if as_json:
            click.echo(json_mod.dumps(payload))
        elif payload["event"] == "platform":
            click.echo(
                f"platform -> {payload['platform']}"
                + (f" ({payload['console_type']})" if payload["console_type"] else "")
            )
        else:
            click.echo(f"console type -> {payload['console_type']}")

    detector.subscribe_to_platform_change(
        lambda platform, console_type: _collect(
            {
                "event": "platform",
                "platform": platform.value,
                "console_type": console_type.value if console_type else None,
            }
        )
    )
    detector.subscribe_to_console_type_change(
        lambda console_type: _collect(
            {
                "event": "console_type",
                "console_type": console_type.value if console_type else None,
            }
        )
    )

    for lineno, line in enumerate(source, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            data = json_mod.loads(line)
            if not isinstance(data, dict):
                raise ValueError("expected a JSON object")
            snapshot = ClassificationInput.from_dict(data)
        except (ValueError, TypeError) as exc:
            click.echo(f"line {lineno}: skipped ({exc})", err=True)
            continue
        provider.set_snapshot(snapshot)
        detector.update()
        # Callbacks for one update run on separate threads; wait for them,
        # then print platform before console type.
        detector.close(timeout=5.0)
        with pending_lock:
            batch = sorted(pending, key=lambda p: p["event"] != "platform")
            pending.clear()
        for payload in batch:
            _emit(payload)
