#!/usr/bin/env python3
"""
DorkScan - Orchestrator

Runs a full dork scan against the configured domain:
1. Dork Generation → Build the query list for the chosen categories
2. Display → Show each dork with a ready-to-open search URL
3. Manual Verification → Optionally open it in a browser, CAPTCHAs handed to you
4. Checkpoints → Progress saved after every dork, resume after Ctrl+C or a crash
5. Reports → Dork lists, stats and a Markdown summary

Run with --learn flag to understand what each step does.
"""
import sys

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from dorkscan.browser import BrowserLauncher
from dorkscan.checkpoint import CheckpointStore
from dorkscan.dork_generator import CATEGORIES, DorkGenerator, parse_category_selection, validate_domain
from dorkscan.errors import FatalScanError, InvalidDomainError, PersistenceError
from dorkscan.operator_console import OperatorConsole
from dorkscan.report_generator import ReportGenerator
from dorkscan.scanner import DorkScanner
from dorkscan.url_verifier import UrlVerifier
from dorkscan.utils import ensure_dirs, error, info, iso_now, load_config, success, warning

console = Console()

EXIT_FATAL = 1
EXIT_BAD_DOMAIN = 2
EXIT_INTERRUPTED = 130

CATEGORY_MENU_TEXT = """[cyan]=== Available dork types ===[/cyan]
1. Generic (common exposures)
2. Product CMS (Adobe Experience Manager)
3. Framework specific (WordPress, Joomla, Drupal, Magento...)
4. E-commerce and payment pages
5. All"""


@click.command()
@click.option('--target', '-t', default=None, help='Target domain (overrides config)')
@click.option('--categories', default=None,
              help=f"Dork types, e.g. '1,3', '5' or names: {', '.join(CATEGORIES)}")
@click.option('--config', '-c', default='config.yaml', help='Path to config file')
@click.option('--no-verify', is_flag=True, help='Only display dorks, never offer browser verification')
@click.option('--no-checkpoint', is_flag=True, help='Do not save or resume from a checkpoint')
@click.option('--fresh', is_flag=True, help='Discard an existing checkpoint before starting')
@click.option('--learn', 'learn_mode', is_flag=True, help='Enable learning mode with explanations')
def main(target: str, categories: str, config: str, no_verify: bool, no_checkpoint: bool,
         fresh: bool, learn_mode: bool):
    """
    DorkScan - search engine dorks with human-in-the-loop verification.

    Examples:
        python orchestrator.py
        python orchestrator.py -t example.com --categories 1,4
        python orchestrator.py -t example.com --no-verify --fresh --learn
    """
    console.print("[blue]🚀 Starting dork scanner...[/blue]")

    try:
        cfg = load_config(config)
    except FileNotFoundError:
        error(f"Config file not found: {config}")
        sys.exit(EXIT_FATAL)

    if no_verify:
        cfg['scan']['manual_validation'] = False
    if no_checkpoint:
        cfg['scan']['save_checkpoint'] = False

    reports = ReportGenerator(cfg)
    operator = OperatorConsole()
    try:
        domain = validate_domain(target or cfg['domain']['target'] or '')
        print_configuration(domain, cfg)

        operator.pause(f"\n✅ Use {domain} as the target? Press ENTER to confirm or CTRL+C to cancel. ")

        if categories is None:
            console.print(CATEGORY_MENU_TEXT)
            categories = operator.ask("\nChoose dork types (e.g. 1,3 or 5 for all): ")
        selected = parse_category_selection(categories)

        generator = DorkGenerator(cfg, learn_mode)
        generator.describe()
        dorks = generator.generate(domain, selected)
        print_banner(domain, len(dorks), selected)

        dirs = ensure_dirs(cfg)
        store = CheckpointStore(cfg['scan']['checkpoint_file'])
        if fresh and store.clear():
            info("Previous checkpoint discarded")

        operator.pause("🚀 Press ENTER to start the scan...")

        verifier = UrlVerifier(cfg, operator, BrowserLauncher(cfg),
                               screenshots_dir=dirs['screenshots'], learn_mode=learn_mode)
        scanner = DorkScanner(cfg, operator, store, reports, verifier=verifier)
        outcome = scanner.run(domain, dorks)

        print_final_report(outcome)
    except InvalidDomainError as e:
        error(str(e))
        sys.exit(EXIT_BAD_DOMAIN)
    except PersistenceError as e:
        error(str(e))
        sys.exit(EXIT_FATAL)
    except FatalScanError as e:
        error(f"💥 Fatal error: {e}")
        sys.exit(EXIT_FATAL)
    except (KeyboardInterrupt, EOFError):
        console.print("\n[yellow]⚠️ Interrupt received! Shutting down safely...[/yellow]")
        marker = reports.write_interrupted_marker()
        if marker:
            info(f"Interrupt marker saved to: {marker}")
        sys.exit(EXIT_INTERRUPTED)
    finally:
        operator.close()

    success("✨ Done")


def print_configuration(domain: str, cfg: dict):
    alt_domains = cfg['domain'].get('alternative_domains') or []
    console.print(Panel(
        f"[bold]Target:[/bold] {domain}\n"
        f"[bold]Alternative domains:[/bold] {', '.join(alt_domains) or '-'}\n"
        f"[bold]Manual verification:[/bold] {'ON' if cfg['scan']['manual_validation'] else 'OFF'}\n"
        f"[bold]Checkpoints:[/bold] {'ON' if cfg['scan']['save_checkpoint'] else 'OFF'}\n"
        f"[bold]Output:[/bold] {cfg['scan']['results_dir']}",
        title="🎯 Configuration",
        border_style="cyan"
    ))


def print_banner(domain: str, dork_count: int, categories: list):
    console.print(Panel.fit(
        "[bold white]DORKS SECURITY SCANNER[/bold white]",
        border_style="blue"
    ))
    console.print(f"[cyan]🎯 Target domain: [bold]{domain}[/bold][/cyan]")
    console.print(f"[cyan]🗂  Categories: [bold]{', '.join(categories)}[/bold][/cyan]")
    console.print(f"[cyan]🔍 Total dorks: [bold]{dork_count}[/bold][/cyan]")
    console.print(f"[cyan]⏱️  Started: [bold]{iso_now()}[/bold][/cyan]\n")
    warning("This tool automates searches for exposed information.")
    warning("Only use it on domains you are authorized to test.")


def print_final_report(outcome):
    stats = outcome.stats

    table = Table(title="📊 Scan Summary", show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="dim")
    table.add_column("Value", justify="right")
    table.add_row("Total dorks", str(stats.total_dorks))
    table.add_row("Processed this run", str(stats.dorks_processed))
    table.add_row("Manually verified", str(stats.manually_checked))
    table.add_row("Completed", "✓" if stats.completed else "○")
    table.add_row("Duration", f"{stats.total_execution_time / 1000 / 60:.2f} min")
    console.print(table)

    if not stats.resume_guaranteed:
        console.print(Panel(
            "[bold red]Checkpoint writes failed during this run.[/bold red]\n"
            "Resuming an interrupted scan may repeat or miss dorks.",
            title="⚠️ Resume not guaranteed",
            border_style="red"
        ))

    for kind, path in outcome.report_paths.items():
        console.print(f"[dim]{kind}: {path}[/dim]")


if __name__ == "__main__":
    main()
