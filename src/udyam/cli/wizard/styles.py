"""
Estilos compartidos para los prompts del wizard.

Integra la paleta de udyam.cli.theme con questionary.
"""

from questionary import Style

from udyam.cli.theme import get_palette


def get_wizard_style() -> Style:
    """Estilo de questionary basado en la paleta actual."""
    p = get_palette()
    return Style([
        ('qmark', f'fg:{p.accent} bold'),
        ('question', 'bold'),
        ('answer', f'fg:{p.success} bold'),
        ('pointer', f'fg:{p.accent} bold'),
        ('highlighted', f'fg:{p.primary} bold'),
        ('instruction', f'fg:{p.muted}'),
    ])
