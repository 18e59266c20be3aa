"""Utility functions for DorkScan."""
import hashlib
import random
import re
import time
import yaml
from pathlib import Path
from datetime import datetime, timezone
from rich.console import Console
from rich.panel import Panel

console = Console()

DEFAULTS = {
    'domain': {
        'target': None,
        'alternative_domains': [],
        'include_subdomains': True,
        'include_variations': True,
        'limit_paths': False,
        'paths': [],
    },
    'scan': {
        'results_dir': 'dorks-results',
        'checkpoint_file': 'dork_checkpoint.json',
        'save_checkpoint': True,
        'manual_validation': True,
        'pause_every': 10,
        'display_delay': 0.1,
        'search_delay': 5,
        'random_delay_max': 5,
    },
    'browser': {
        'headless': False,
        'viewport': {'width': 1280, 'height': 800},
        'args': None,
        'navigation_timeout': 30000,
        'wait_until': 'networkidle',
        'screenshots': True,
    },
    'handoff': {
        'timeout': 60,
        'stable_window_ms': 3000,
        'max_wait_ms': 20000,
        'poll_interval_ms': 500,
    },
}


def load_config(config_path: str = "config.yaml") -> dict:
    """Load configuration from YAML file, filling in missing settings."""
    with open(config_path, 'r') as f:
        cfg = yaml.safe_load(f) or {}
    for section, values in DEFAULTS.items():
        merged = dict(values)
        merged.update(cfg.get(section) or {})
        cfg[section] = merged
    return cfg


def ensure_dirs(config: dict) -> dict:
    """Create the results directory structure."""
    base = Path(config['scan']['results_dir'])
    dirs = {
        'base': base,
        'reports': base / "reports",
        'screenshots': base / "screenshots",
    }
    for d in dirs.values():
        d.mkdir(parents=True, exist_ok=True)
    return {k: str(v) for k, v in dirs.items()}


def timestamp() -> str:
    """Filesystem-safe UTC timestamp (ISO-8601 with ':' and '.' replaced)."""
    return re.sub(r'[:.]', '-', iso_now())


def iso_now() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def dork_hash(dork: str) -> str:
    """Short md5 fingerprint of a dork, used in file names."""
    return hashlib.md5(dork.encode('utf-8')).hexdigest()[:8]


def random_delay(base: float, random_max: float, sleep=time.sleep) -> float:
    """Sleep for base + U(0, random_max) seconds and return the delay."""
    delay = base + random.uniform(0, random_max)
    if delay > 0:
        info(f"Waiting {delay:.2f}s before the next action...")
        sleep(delay)
    return delay

def learn(topic: str, explanation: str, learn_mode: bool = False):
    """Print learning explanation if learn mode is enabled."""
    if learn_mode:
        console.print(Panel(explanation, title=f"📚 Learn: {topic}", border_style="blue"))

def success(msg: str):
    """Print success message."""
    console.print(f"[green]✓[/green] {msg}")

def error(msg: str):
    """Print error message."""
    console.print(f"[red]✗[/red] {msg}")

def info(msg: str):
    """Print info message."""
    console.print(f"[blue]ℹ[/blue] {msg}")

def warning(msg: str):
    """Print warning message."""
    console.print(f"[yellow]⚠[/yellow] {msg}")

def alert(title: str, msg: str):
    """Print a loud, boxed error the operator should not miss."""
    console.print(Panel(f"[bold red]{msg}[/bold red]", title=title, border_style="red"))
