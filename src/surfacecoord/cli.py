#!/usr/bin/env python3
"""
SurfaceCoord CLI - Command Line Interface for SurfaceCoord

Provides:
- show-config: print the effective configuration and feature flags
- demo: run a scripted coordination scenario on a virtual clock
"""

import asyncio
import json
import logging
import sys
from typing import Optional

import click

from surfacecoord import __version__
from surfacecoord.config import load_coordination_config
from surfacecoord.coordination_system import CoordinationSystem
from surfacecoord.events.system_events import SystemEvent
from surfacecoord.feature_flags.feature_flags import FeatureFlags
from surfacecoord.keyboard.keyboard_models import KeyEvent
from surfacecoord.scheduling.timer_scheduler import VirtualTimerScheduler


@click.group()
@click.version_option(version=__version__, prog_name="surfacecoord")
@click.option('--verbose', '-v', is_flag=True, help='Verbose (DEBUG) logging')
def main(verbose: bool):
    """SurfaceCoord - UI resource arbitration"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr
    )


@main.command('show-config')
@click.option('--config', 'config_file', type=click.Path(dir_okay=False), default=None,
              help='JSON configuration file (defaults to $SURFACECOORD_CONFIG)')
def show_config(config_file: Optional[str]):
    """Print the effective configuration as JSON"""
    config = load_coordination_config(config_file=config_file)
    flags = FeatureFlags()
    click.echo(json.dumps({
        "config": config.model_dump(mode="json"),
        "feature_flags": flags.enabled_flags()
    }, indent=2, sort_keys=True))


@main.command()
@click.option('--config', 'config_file', type=click.Path(dir_okay=False), default=None,
              help='JSON configuration file (defaults to $SURFACECOORD_CONFIG)')
@click.option('--max-concurrent-animations', type=click.IntRange(1, 5), default=1, show_default=True,
              help='Motion concurrency cap used by the scenario')
def demo(config_file: Optional[str], max_concurrent_animations: int):
    """Run a scripted scenario and print the system event stream as JSON lines"""
    config = load_coordination_config(
        config_file=config_file,
        motion={"max_concurrent_animations": max_concurrent_animations}
    )
    scheduler = VirtualTimerScheduler()

    def emit(event: SystemEvent) -> None:
        click.echo(event.model_dump_json())

    with CoordinationSystem(config=config, scheduler=scheduler, on_system_event=emit) as system:
        run_demo_scenario(system, scheduler)

    click.echo(json.dumps({"scenario": "complete", "virtual_time_ms": scheduler.now_ms()}), err=True)


def run_demo_scenario(system: CoordinationSystem, scheduler: VirtualTimerScheduler) -> None:
    """Mount participants, contend for attention, motion and narration, then unmount"""
    system.register_participant("main-nav", "navigation", 3, element="nav-root")
    system.register_participant("file-tree", "tree", 2, element="tree-root")

    system.registry.request_attention("main-nav")
    system.register_participant("ctx-menu", "context", 4, element="ctx-root")
    system.registry.request_attention("ctx-menu")
    system.registry.request_attention("main-nav")

    async def animate() -> None:
        await system.motion.request_animation(
            participant_id="ctx-menu", motion_type="enter", duration_class="fast"
        )
        await system.motion.request_animation(
            participant_id="file-tree", motion_type="slide", duration_class="standard"
        )

    asyncio.run(animate())
    scheduler.advance(150)
    scheduler.advance(300)

    for _ in range(5):
        system.announcements.announce("Saved", duration=2000)
        scheduler.advance(10)
    scheduler.advance(system.config.announcements.debounce_delay_ms + system.config.render_delay_ms)

    system.focus.focus("file-tree")
    system.dispatch_key(KeyEvent(key="ArrowDown"))
    system.dispatch_key(KeyEvent(key="ArrowRight"))

    system.register_participant("oversized-sidebar", "sidebar", 10)

    system.unregister_participant("ctx-menu")
    scheduler.advance(2000)


if __name__ == '__main__':
    main()
