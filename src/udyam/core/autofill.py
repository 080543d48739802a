"""
Auto-completado de ciudad y estado a partir del código PIN.

El coordinador observa el campo PIN del paso de datos de la empresa.
Cuando el valor es válido programa un lookup tras un periodo de silencio;
cada nuevo valor incrementa la generación y cancela el lookup pendiente,
de modo que un resultado tardío solo se aplica si su generación sigue
siendo la actual.
"""

import asyncio
import logging
from typing import Any, Optional

from udyam.core.validators import FieldValidator
from udyam.exceptions import GatewayError
from udyam.gateway.base import PostalLookup

logger = logging.getLogger(__name__)


class FormBuffer:
    """
    Valores transitorios del paso actual.

    Registra el último valor escrito por el auto-completado en cada campo
    para no pisar ediciones manuales posteriores.
    """

    def __init__(self):
        self.values: dict[str, Any] = {}
        self.autofilled: dict[str, str] = {}

    def get(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)

    def set(self, name: str, value: Any) -> None:
        """Edición manual del usuario."""
        self.values[name] = value

    def autofill(self, name: str, value: str) -> bool:
        """
        Escribe un valor auto-completado si el campo no fue editado a mano.

        Returns:
            True si el valor se escribió
        """
        current = self.values.get(name)
        current = "" if current is None else str(current)
        last = self.autofilled.get(name)
        if last is None:
            if current:
                return False
        elif current != last:
            return False
        self.values[name] = value
        self.autofilled[name] = value
        return True

    def clear(self) -> None:
        self.values.clear()
        self.autofilled.clear()

    def as_dict(self) -> dict[str, Any]:
        return dict(self.values)


class AutoFillCoordinator:
    """Lookup postal con debounce y descarte de resultados obsoletos."""

    def __init__(
        self,
        lookup: PostalLookup,
        buffer: FormBuffer,
        validator: FieldValidator,
        targets: tuple[str, ...] = ("city", "state"),
        delay: float = 0.5,
    ):
        self.lookup = lookup
        self.buffer = buffer
        self.validator = validator
        self.targets = targets
        self.delay = delay
        self.generation = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def field_name(self) -> str:
        return self.validator.name

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def observe(self, value: Any) -> Optional[asyncio.Task]:
        """
        Registra un nuevo valor del campo observado.

        Cancela cualquier lookup pendiente y, si el valor cumple el
        validador del campo (longitud exacta), programa uno nuevo.
        Sin un event loop en ejecución no se programa nada.
        """
        self.cancel()
        pincode = self.validator.normalize(value)
        if not pincode or self.validator.check(pincode) is not None:
            return None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("Sin event loop en ejecución; lookup de PIN %s omitido", pincode)
            return None
        self._task = loop.create_task(self._run(self.generation, pincode))
        return self._task

    def cancel(self) -> None:
        """Invalida la generación actual y cancela el lookup pendiente."""
        self.generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def wait_idle(self) -> None:
        """Espera a que termine el lookup pendiente, si lo hay."""
        task = self._task
        if task is not None:
            await asyncio.wait({task})

    async def _run(self, generation: int, pincode: str) -> None:
        await asyncio.sleep(self.delay)
        if generation != self.generation:
            return
        try:
            address = await self.lookup.lookup(pincode)
        except GatewayError as e:
            logger.debug("Lookup de PIN %s falló: %s", pincode, e.message)
            return
        if generation != self.generation:
            logger.debug("Resultado de PIN %s descartado (generación obsoleta)", pincode)
            return

        found = {"city": address.city, "state": address.state}
        for name in self.targets:
            if name in found and not self.buffer.autofill(name, found[name]):
                logger.debug("Campo '%s' editado manualmente, no se sobrescribe", name)
