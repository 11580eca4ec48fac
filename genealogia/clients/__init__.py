from .registry import RegistryClient, RegistryError, UpstreamUnavailable, RateLimitError

__all__ = [
    "RegistryClient",
    "RegistryError", "UpstreamUnavailable", "RateLimitError",
]
