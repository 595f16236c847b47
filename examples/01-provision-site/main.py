"""
Provision Site Example

This example demonstrates the full boot flow:
1. Load a Blueprint from YAML
2. Create site metadata with persistent storage
3. Boot the site into a local runtime

The first run downloads and installs the plugins and persists the site
under ~/.wpforge/opfs; later runs load it from there without running
the Blueprint steps again.

Run: python examples/01-provision-site/main.py /tmp/wpforge-site
"""

import asyncio
import sys
from pathlib import Path

from wpforge import LocalRuntime, SiteStorage, boot_site, create_site_metadata, load_blueprint
from wpforge.config import configure_logging, get_settings
from wpforge.interpreter import ProgressTracker, StepInterpreter
from wpforge.storage import MountDeviceAccessor


async def main(runtime_root: str) -> None:
    settings = get_settings()
    configure_logging(settings)

    blueprint = load_blueprint(Path(__file__).parent / "blueprint.yaml")
    site = create_site_metadata("Example Site", blueprint, SiteStorage.OPFS)

    runtime = LocalRuntime(runtime_root, document_root=settings.mountpoint)
    tracker = ProgressTracker()

    result = await boot_site(
        site,
        runtime,
        devices=MountDeviceAccessor.from_settings(settings),
        interpreter=StepInterpreter.from_settings(settings),
        progress=tracker,
    )

    print(f"Provisioned: {result.provisioned}")
    for step in result.run_result:
        print(f"  {step.index}: {step.kind} -> {step.install_result}")
    for error in result.run_result.activation_errors:
        print(f"  activation failed: {error}")
    print(f"Active plugins: {runtime.active_plugins}")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "/tmp/wpforge-site"))
