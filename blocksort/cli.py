"""
blocksort CLI - Conveyor Block Sorting Robot
Command-line interface for running the sorter and collecting training data
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from blocksort import __version__
from blocksort.config import (
    BeltSettings,
    BucketSettings,
    CaptureSettings,
    ChannelSettings,
    Config,
    load_config,
)
from blocksort.errors import SorterError

# Setup rich console
console = Console()
app = typer.Typer(
    name="blocksort",
    help="Image classifying block sorter that runs on a Raspberry Pi",
    add_completion=False,
)

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
    handlers=[RichHandler(rich_tracebacks=True, console=console)],
)
logger = logging.getLogger(__name__)


def version_callback(value: bool):
    """Show version and exit."""
    if value:
        console.print(f"[bold cyan]blocksort[/bold cyan] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """
    blocksort - photographs blocks on a conveyor and drops each one into the
    bucket for its class.

    Classification is done by a separate computer running the trained model,
    which connects to the sorter over the network.
    """
    pass


async def run_sorter(config: Config, cycles: Optional[int] = None):
    """
    Open the hardware, wait for the classifier, and run the sort loop.

    Args:
        config: Loaded configuration
        cycles: Number of items to sort (None runs forever)
    """
    from blocksort.capture import CaptureDevice
    from blocksort.channel import ClassificationChannel, StreamTransport
    from blocksort.controller import SortController
    from blocksort.hardware import open_belt, open_bucket
    from blocksort.log import bind_remote_log, unbind_remote_log

    class_table = config.class_table()
    belt = open_belt(BeltSettings.from_config(config))
    bucket = open_bucket(BucketSettings.from_config(config), class_table)
    capture = CaptureDevice.from_settings(CaptureSettings.from_config(config))

    channel_settings = ChannelSettings.from_config(config)
    transport = await StreamTransport.accept(channel_settings.host, channel_settings.port)
    bind_remote_log(transport)

    controller = SortController(
        capture=capture,
        channel=ClassificationChannel(transport),
        belt=belt,
        bucket=bucket,
        class_table=class_table,
    )

    try:
        await controller.run(cycles)
    finally:
        belt.release()
        unbind_remote_log()
        await transport.close()


@app.command()
def run(
    config_path: str = typer.Option(
        "settings.yaml",
        "--config",
        "-c",
        help="Path to configuration file",
    ),
    cycles: Optional[int] = typer.Option(
        None,
        "--cycles",
        "-n",
        help="Stop after sorting this many items (default: run forever)",
    ),
):
    """
    Start the sorter.

    Requires a separate computer running the classifier to connect to the
    configured channel port.

    Example:
        blocksort run --config settings.yaml
    """
    console.print("[bold cyan]Robot sorter[/bold cyan]")
    console.print("=" * 60)

    try:
        config = load_config(config_path)
    except FileNotFoundError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    try:
        asyncio.run(run_sorter(config, cycles))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
    except SorterError as e:
        console.print(f"[bold red]Sorter stopped:[/bold red] {e}")
        raise typer.Exit(1)


async def collect_images(capture, output_dir: Path, count: Optional[int] = None) -> int:
    """
    Capture training images into a directory until stopped.

    Args:
        capture: CaptureDevice
        output_dir: Directory for numbered images
        count: Number of images to take (None runs forever)

    Returns:
        Number of images captured
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    i = 0
    while count is None or i < count:
        path = await capture.capture(output_dir / f"{i}.jpg")
        if path is None:
            raise SorterError(f"Capture failed after {i} images")
        console.print(f"Captured {path}")
        i += 1

    return i


@app.command()
def data(
    category: str = typer.Argument(..., help="Class name, used as the folder name"),
    config_path: str = typer.Option(
        "settings.yaml",
        "--config",
        "-c",
        help="Path to configuration file",
    ),
    data_dir: str = typer.Option(
        "data",
        "--data-dir",
        "-d",
        help="Root directory for training images",
    ),
    count: Optional[int] = typer.Option(
        None,
        "--count",
        "-n",
        help="Number of images to capture (default: until interrupted)",
    ),
    timeout: int = typer.Option(
        0,
        "--timeout",
        "-t",
        help="Delay before each shot (ms)",
    ),
):
    """
    Capture images of one class to train the classifier on.

    Example:
        blocksort data gears --count 50
    """
    from blocksort.capture import CaptureDevice

    try:
        config = load_config(config_path)
    except FileNotFoundError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    capture = CaptureDevice.from_settings(CaptureSettings.from_config(config))
    capture.timeout = timeout
    output_dir = Path(data_dir) / category

    try:
        captured = asyncio.run(collect_images(capture, output_dir, count))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        return
    except SorterError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print(f"\n[bold green]✓ Captured {captured} images[/bold green] in {output_dir}")


@app.command()
def classes(
    config_path: str = typer.Option(
        "settings.yaml",
        "--config",
        "-c",
        help="Path to configuration file",
    ),
):
    """
    Show the class table and the servo pulse width for each class.
    """
    from blocksort.labels import angle_to_pulse_width

    try:
        config = load_config(config_path)
        class_table = config.class_table()
    except (FileNotFoundError, SorterError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    bucket = BucketSettings.from_config(config)

    table = Table(title="Classes")
    table.add_column("Label", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Angle")
    table.add_column("Pulse Width")

    for label in class_table.values():
        try:
            pulse = angle_to_pulse_width(
                label.angle, bucket.min_pulse_width, bucket.max_pulse_width
            )
            pulse_text = f"{pulse:.0f} us"
        except SorterError as e:
            pulse_text = f"[red]{e}[/red]"
        table.add_row(str(label.id), label.name, f"{label.angle:g}°", pulse_text)

    console.print(table)


if __name__ == "__main__":
    app()
