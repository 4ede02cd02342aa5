"""Transaction model, signing and script authorization for CodeChain parcels and assets."""

from codechain_sdk.config.settings import SDKConfig
from codechain_sdk.sdk import SDK, Core, KeyFactory

__version__ = "0.1.0"

__all__ = ["SDK", "Core", "KeyFactory", "SDKConfig", "__version__"]
