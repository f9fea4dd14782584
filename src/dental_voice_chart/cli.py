"""
Command Line Interface

CLI for the dental voice-chart pipeline.
"""

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from dental_voice_chart import __version__
from dental_voice_chart.capture.audio_capture import AudioCapture
from dental_voice_chart.chart.chart_types import PatientChart
from dental_voice_chart.errors import ExtractionContractError, MicrophoneError, VoiceChartError
from dental_voice_chart.extraction.chart_types import ACTION_CODES, STATUS_CODES, WHOLE_MOUTH
from dental_voice_chart.pipeline.config import PipelineConfig, load_config
from dental_voice_chart.pipeline.pipeline import Pipeline, PipelineResult, PipelineStatus

app = typer.Typer(
    name="dental-voice-chart",
    help="Hands-free voice charting for veterinary dentistry",
    add_completion=False,
)
console = Console()


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _load_pipeline(
    config: Optional[Path],
    charts_dir: Optional[Path] = None,
    speak: bool = True,
) -> Pipeline:
    """Build a pipeline from a config file (or defaults) plus CLI overrides."""
    if config:
        if not config.exists():
            console.print(f"[red]Error: Config file not found: {config}[/red]")
            raise typer.Exit(1)
        pipeline_config = load_config(config)
    else:
        pipeline_config = PipelineConfig()

    if charts_dir is not None:
        pipeline_config.storage.backend = "json"
        pipeline_config.storage.directory = str(charts_dir)
    if not speak:
        pipeline_config.confirmation.enabled = False

    return Pipeline(pipeline_config)


def _tooth_label(tooth_id: str) -> str:
    return "전체" if tooth_id == WHOLE_MOUTH else tooth_id


def _print_result(result: PipelineResult, as_json: bool = False) -> None:
    """Render a pipeline result and exit non-zero on failure."""
    if as_json:
        console.print_json(json.dumps(result.to_dict(), ensure_ascii=False))
    elif result.status == PipelineStatus.APPLIED:
        console.print(f"[dim]Transcript:[/dim] {result.transcript}")
        console.print(f"[green]{result.confirmation}[/green]")
        if not result.confirmation_played:
            console.print("[dim](spoken confirmation not played)[/dim]")
    elif result.status == PipelineStatus.FAILED:
        console.print(f"[red]{result.user_message}[/red]")
        console.print(f"[dim]{result.stage.value}: {result.error}[/dim]")
        if result.raw_response is not None:
            console.print("[dim]Raw model response:[/dim]")
            console.print(result.raw_response, markup=False)
    else:
        if result.transcript:
            console.print(f"[dim]Transcript:[/dim] {result.transcript}")
        console.print(f"[yellow]{result.user_message}[/yellow]")

    if not result.ok:
        raise typer.Exit(1)


@app.command()
def record(
    patient_id: str = typer.Argument(..., help="Patient whose chart is updated"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
    charts_dir: Optional[Path] = typer.Option(None, "--charts-dir", help="Chart directory"),
    speak: bool = typer.Option(True, "--speak/--no-speak", help="Spoken confirmation"),
    once: bool = typer.Option(False, "--once", help="Stop after one command"),
) -> None:
    """Record voice commands (Enter to start and stop) and update the chart."""
    pipeline = _load_pipeline(config, charts_dir, speak)

    try:
        pipeline.prepare()
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[bold]Voice charting for patient {patient_id}[/bold]")
    console.print("[dim]Press Enter to start recording, Enter again to stop. Ctrl+C quits.[/dim]")

    try:
        while True:
            console.input("\n[bold cyan]● Enter[/bold cyan] to record ")
            try:
                pipeline.start_recording()
            except MicrophoneError as e:
                console.print(f"[red]{e.user_message}[/red]")
                console.print(f"[dim]{e}[/dim]")
                raise typer.Exit(1)

            console.input("[bold red]■ Recording...[/bold red] Enter to stop ")
            with console.status("Analyzing..."):
                result = pipeline.finish_recording(patient_id)

            if result is not None:
                try:
                    _print_result(result)
                except typer.Exit:
                    if once:
                        raise
            if once:
                break
    except (KeyboardInterrupt, EOFError):
        pipeline.capture.stop()
        console.print("\n[yellow]Recording stopped[/yellow]")


@app.command()
def process(
    input_file: Path = typer.Argument(..., help="Audio file to process"),
    patient_id: str = typer.Argument(..., help="Patient whose chart is updated"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
    charts_dir: Optional[Path] = typer.Option(None, "--charts-dir", help="Chart directory"),
    speak: bool = typer.Option(True, "--speak/--no-speak", help="Spoken confirmation"),
    as_json: bool = typer.Option(False, "--json", help="Print the full result as JSON"),
) -> None:
    """Process a recorded audio file and update the chart."""
    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    pipeline = _load_pipeline(config, charts_dir, speak)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Processing audio...", total=None)
        try:
            result = pipeline.process_file(input_file, patient_id)
        except ValueError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)
        progress.update(task, completed=True)

    _print_result(result, as_json)


@app.command()
def transcript(
    text: str = typer.Argument(..., help="Transcript text to process"),
    patient_id: str = typer.Argument(..., help="Patient whose chart is updated"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
    charts_dir: Optional[Path] = typer.Option(None, "--charts-dir", help="Chart directory"),
    speak: bool = typer.Option(True, "--speak/--no-speak", help="Spoken confirmation"),
    as_json: bool = typer.Option(False, "--json", help="Print the full result as JSON"),
) -> None:
    """Apply transcript text directly to the chart (skip transcription)."""
    pipeline = _load_pipeline(config, charts_dir, speak)
    try:
        result = pipeline.process_transcript(text, patient_id)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    _print_result(result, as_json)


@app.command()
def analyze(
    text: str = typer.Argument(..., help="Transcript text to analyze"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
) -> None:
    """Extract chart operations from text without touching any chart."""
    pipeline = _load_pipeline(config, speak=False)

    try:
        analysis = pipeline.analyze_transcript(text)
    except ExtractionContractError as e:
        console.print(f"[red]{e.user_message}[/red] [dim]{e}[/dim]")
        console.print(e.raw_response, markup=False)
        raise typer.Exit(1)
    except VoiceChartError as e:
        console.print(f"[red]{e.user_message}[/red] [dim]{e}[/dim]")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print_json(json.dumps(analysis.to_dict(), ensure_ascii=False))


@app.command()
def chart(
    patient_id: str = typer.Argument(..., help="Patient id"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
    charts_dir: Optional[Path] = typer.Option(None, "--charts-dir", help="Chart directory"),
    as_json: bool = typer.Option(False, "--json", help="Print the chart document"),
) -> None:
    """Show a patient's dental chart."""
    pipeline = _load_pipeline(config, charts_dir, speak=False)

    try:
        document = pipeline.store.load(patient_id)
    except VoiceChartError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if document is None:
        console.print(f"[yellow]No chart recorded for patient {patient_id}[/yellow]")
        raise typer.Exit(1)

    patient_chart = PatientChart.from_dict(document)
    if as_json:
        console.print_json(patient_chart.to_json())
        return

    table = Table(title=f"Dental chart: {patient_id}")
    table.add_column("Tooth", style="bold")
    table.add_column("Status")
    table.add_column("Procedures")

    for entry in patient_chart.sorted_teeth():
        statuses = []
        for code, value in entry.statuses.items():
            label = STATUS_CODES[code].label if code in STATUS_CODES else code
            statuses.append(label if value is True else f"{label} {value}")
        procedures = [
            ACTION_CODES[code].label if code in ACTION_CODES else code
            for code in entry.completed_procedures
        ]
        table.add_row(_tooth_label(entry.tooth_id), ", ".join(statuses), ", ".join(procedures))

    console.print(table)
    if patient_chart.findings:
        console.print("\n[bold]Findings[/bold]")
        console.print(patient_chart.findings, markup=False)
    if patient_chart.updated_at:
        console.print(f"\n[dim]Updated {patient_chart.updated_at}[/dim]")


@app.command()
def devices() -> None:
    """List available audio input devices."""
    input_devices = AudioCapture.list_devices()

    if not input_devices:
        console.print("[yellow]No audio input devices found[/yellow]")
        raise typer.Exit(0)

    console.print("[bold]Available audio input devices:[/bold]\n")
    for device in input_devices:
        console.print(
            f"  [{device['index']}] {device['name']}"
            f"\n      Channels: {device['channels']}, "
            f"Sample Rate: {device['sample_rate']} Hz"
        )


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"dental-voice-chart version {__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
