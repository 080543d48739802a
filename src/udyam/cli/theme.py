"""
Tema de la interfaz CLI de Udyam.

Paleta de colores y funciones que imprimen directamente a la consola.
"""

from dataclasses import dataclass
from typing import Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.theme import Theme


@dataclass
class ColorPalette:
    """Paleta de colores para la CLI."""
    primary: str      # Títulos, destacados
    secondary: str    # Subtítulos
    accent: str       # Valores importantes
    success: str
    warning: str
    error: str
    info: str
    muted: str        # Texto secundario/atenuado
    note: str         # Notas informativas
    border: str


# Tema por defecto - colores pasteles
THEME_DEFAULT = ColorPalette(
    primary="#5f87af",      # Azul suave
    secondary="#87afaf",    # Cyan apagado
    accent="#af87af",       # Púrpura suave
    success="#87af87",      # Verde suave
    warning="#d7af5f",      # Amarillo/naranja suave
    error="#d75f5f",        # Rojo suave
    info="#5f87af",         # Azul info
    muted="#808080",        # Gris
    note="#5fd7d7",         # Cyan brillante
    border="#5f5f5f",       # Gris oscuro
)


_console: Optional[Console] = None


def get_palette() -> ColorPalette:
    """Obtiene la paleta de colores actual."""
    return THEME_DEFAULT


def get_console() -> Console:
    """Obtiene la consola Rich con el tema aplicado."""
    global _console
    if _console is None:
        p = get_palette()
        _console = Console(theme=Theme({
            "primary": p.primary,
            "secondary": p.secondary,
            "success": p.success,
            "warning": p.warning,
            "error": p.error,
            "muted": p.muted,
            "title": f"bold {p.primary}",
        }))
    return _console


# =============================================================================
# IMPRESIÓN
# =============================================================================

def print_header(text: str, subtitle: str = None) -> None:
    """Imprime un encabezado."""
    p = get_palette()
    content = Text(text, style=f"bold {p.primary}")
    if subtitle:
        content.append(f"\n{subtitle}", style=p.muted)
    get_console().print(Panel(content, border_style=p.border, box=box.ROUNDED, padding=(0, 2)))


def print_step(step_num: int, total: int, title: str, description: str = None) -> None:
    """Imprime indicador de paso del wizard con barra de progreso."""
    console = get_console()
    p = get_palette()

    bar_width = 30
    filled_width = int((step_num / total) * bar_width)
    percentage = int((step_num / total) * 100)

    progress_line = Text()
    progress_line.append("█" * filled_width, style=p.primary)
    progress_line.append("░" * (bar_width - filled_width), style=p.muted)
    progress_line.append(f"  {percentage}%", style=p.muted)
    if description:
        progress_line.append(f"\n{description}", style=f"italic {p.muted}")

    step_title = Text()
    step_title.append(f" Paso {step_num} de {total}", style=f"bold {p.secondary}")

    console.print()
    console.print(Panel(
        progress_line,
        title=step_title,
        subtitle=Text(title, style=f"italic {p.muted}"),
        subtitle_align="left",
        title_align="left",
        border_style=p.border,
        box=box.ROUNDED,
        padding=(0, 1),
        width=60,
    ))


def print_success(text: str) -> None:
    """Imprime mensaje de éxito."""
    get_console().print(Text(f"[+] {text}", style=get_palette().success))


def print_warning(text: str) -> None:
    """Imprime advertencia."""
    get_console().print(Text(f"[!] {text}", style=get_palette().warning))


def print_error(text: str) -> None:
    """Imprime error."""
    get_console().print(Text(f"[x] {text}", style=get_palette().error))


def print_info(text: str) -> None:
    """Imprime información."""
    get_console().print(Text(f"[i] {text}", style=get_palette().info))


def print_note(text: str) -> None:
    """Imprime una nota destacada."""
    get_console().print(Text(f"  >> {text}", style=get_palette().note))


def print_field_errors(errors: dict) -> None:
    """Imprime los errores de campo de un paso, uno por línea."""
    for error in errors.values():
        print_error(error.message)


def create_table(title: str, columns: list[str]) -> Table:
    """Crea una tabla Rich con el estilo del tema."""
    p = get_palette()
    table = Table(
        title=title,
        title_style=f"bold {p.primary}",
        border_style=p.border,
        header_style=f"bold {p.secondary}",
        box=box.SIMPLE_HEAD,
    )
    for column in columns:
        table.add_column(column)
    return table
