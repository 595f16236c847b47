"""
wpforge - Blueprint-driven provisioning for WordPress sites.

wpforge turns a declarative Blueprint document into a provisioned
WordPress instance:

- **Blueprint Compiler**: Normalize raw Blueprints into immutable manifests
- **Resource Resolution**: Fetch archives over HTTP and subtrees from git
- **Asset Installation**: Install plugins and themes with conflict policies
- **Step Interpreter**: Run manifest steps in order, failing fast
- **Site Storage**: Persistent mounts, installed-site detection and sync

Quick Start:
    >>> from wpforge import LocalRuntime, run_blueprint
    >>>
    >>> runtime = LocalRuntime("/tmp/site")
    >>> result = await run_blueprint(
    ...     {
    ...         "steps": [
    ...             {
    ...                 "step": "installPlugin",
    ...                 "pluginZipFile": {"resource": "wordpress.org/plugins", "slug": "hello-dolly"},
    ...             }
    ...         ]
    ...     },
    ...     runtime,
    ... )
"""

__version__ = "0.1.0"
__license__ = "MIT"

# Core exports for convenient imports
from wpforge.blueprint import CompiledBlueprint, compile_blueprint, load_blueprint
from wpforge.boot import BootResult, boot_site
from wpforge.errors import ProvisioningError
from wpforge.interpreter import RunResult, StepInterpreter, run_blueprint
from wpforge.resources import ResourceResolver
from wpforge.runtime import LocalRuntime, Runtime
from wpforge.storage import (
    MountDeviceAccessor,
    SiteMetadata,
    SiteStorage,
    create_site_metadata,
    prepare_environment,
    sync_mount,
)

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Blueprint
    "CompiledBlueprint",
    "compile_blueprint",
    "load_blueprint",
    # Execution
    "StepInterpreter",
    "RunResult",
    "run_blueprint",
    "ResourceResolver",
    "ProvisioningError",
    # Runtime
    "Runtime",
    "LocalRuntime",
    # Sites
    "SiteMetadata",
    "SiteStorage",
    "MountDeviceAccessor",
    "create_site_metadata",
    "prepare_environment",
    "sync_mount",
    "boot_site",
    "BootResult",
]
