from rich.console import Console
from rich.theme import Theme

# Shared console for user-facing output. Log records go through logging instead.
# soft_wrap keeps long paths on one line when output is piped.
console = Console(soft_wrap=True, theme=Theme({
    "info": "dim cyan",
    "warning": "yellow",
    "error": "bold red",
    "found": "green",
    "missing": "bold red",
    "step": "bold cyan",
    "repr.str": "none",
}))
