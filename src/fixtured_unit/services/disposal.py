"""Deterministic disposal of container-owned service instances."""

import logging
from collections.abc import Sequence

from fixtured_unit.services.protocols import AsyncClosable, Closable

logger = logging.getLogger(__name__)


async def dispose_instances(instances: Sequence[object]) -> None:
    """Dispose instances in reverse creation order.

    Awaits ``aclose()`` when an instance provides it, otherwise calls
    ``close()``. Instances offering neither are skipped. Every instance is
    attempted even when an earlier one fails.

    Raises:
        Exception: The failure, when exactly one instance failed to close
        ExceptionGroup: When several instances failed to close

    """
    errors: list[Exception] = []

    for instance in reversed(instances):
        name = type(instance).__name__
        try:
            if isinstance(instance, AsyncClosable):
                await instance.aclose()
            elif isinstance(instance, Closable):
                instance.close()
            else:
                continue
            logger.debug("Disposed service instance: %s", name)
        except Exception as e:
            logger.error("Failed to dispose service instance %s: %s", name, e)
            errors.append(e)

    if len(errors) == 1:
        raise errors[0]
    if errors:
        raise ExceptionGroup("Failed to dispose service instances", errors)
