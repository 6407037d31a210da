# Packsync Environment Detection Utilities
# Run-context filtering for environment-specific content

from typing import TYPE_CHECKING

from packsync.config.schema import Environment

if TYPE_CHECKING:
    from packsync.manifest.schema import ContentItem


def get_current_environment(environment: Environment | str | None = None) -> Environment:
    """
    Get the current run context.

    Args:
        environment: Configured environment, or None for the default.

    Returns:
        Environment.CLIENT or Environment.SERVER.
    """
    if environment is None:
        return Environment.CLIENT
    env = Environment(environment)
    if env == Environment.BOTH:
        raise ValueError("The current environment must be 'client' or 'server'")
    return env


def applies(item: "ContentItem", current_environment: Environment) -> bool:
    """
    Check if a content item is relevant to the current run context.

    Args:
        item: Content item with its declared applicability.
        current_environment: Environment this run is for.

    Returns:
        True if the item targets both environments or the current one.
    """
    if item.environment == Environment.BOTH:
        return True
    return item.environment == current_environment
