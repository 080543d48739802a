"""
Wizard - Asistente interactivo de registro Udyam.

Estructura:
- steps.py: FormStep y WizardNavigator sobre la FormStateMachine
- styles.py: Estilo de questionary
- main.py: Punto de entrada principal
"""

from udyam.cli.wizard.main import build_machine, wizard_main

__all__ = ["build_machine", "wizard_main"]
