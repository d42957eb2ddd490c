"""Dvornik command-line entry point.

Runs a single GC pass and exits: status 0 on success (including when
nothing was stale), 1 on any configuration, listing or deletion error.
"""

from __future__ import annotations

import asyncio
import sys
from typing import TextIO

import structlog

from dvornik import __version__
from dvornik.config import RunParameters, get_settings, load_run_parameters
from dvornik.drivers.k8s import K8sDriver
from dvornik.errors import DvornikError
from dvornik.gc import GCResult, PodGC
from dvornik.logging_config import configure_logging

logger = structlog.get_logger()


async def run(params: RunParameters, stream: TextIO | None = None) -> GCResult:
    """Connect to the cluster and run one pass."""
    driver = K8sDriver(kubeconfig=params.kubeconfig)
    try:
        await driver.connect()
        return await PodGC(driver, params, stream=stream).run()
    finally:
        await driver.close()


def _fail(error: DvornikError) -> None:
    print(f"dvornik: {error.message}", file=sys.stderr)
    sys.exit(1)


def main() -> None:
    """Main entry point."""
    try:
        settings = get_settings()
    except DvornikError as e:
        _fail(e)
        return

    configure_logging(settings.log_level, settings.log_format)
    logger.info("dvornik.startup", version=__version__)

    try:
        params = load_run_parameters(settings)
        result = asyncio.run(run(params))
    except DvornikError as e:
        logger.error("dvornik.failed", **e.to_dict())
        _fail(e)
        return

    logger.info(
        "dvornik.done",
        namespace=result.namespace,
        removed=result.removed_count,
    )


if __name__ == "__main__":
    main()
