"""
Centralized user-facing message templates for prakasa-env.

This module provides:
- Consistent wording for component failures and launch errors
- Next-step guidance printed after check and install runs
- Manual remediation hints for prerequisites that cannot be installed

Usage:
    from prakasa_env.error_messages import format_error, ERROR_MESSAGES

    msg = format_error('SECONDARY_OS_UNAVAILABLE', distro='Ubuntu-24.04')
"""

from typing import Dict, Optional


ERROR_MESSAGES: Dict[str, str] = {
    # Configuration
    'CONFIG_UNKNOWN_KEY': (
        "Unknown configuration key '{key}'.\n"
        "Supported keys: {keys}"
    ),
    'CONFIG_PARSE_ERROR': (
        "Failed to parse configuration file: {path}\n"
        "Error: {error}"
    ),
    'CONFIG_NOT_MAPPING': (
        "Configuration file {path} must contain a mapping of key: value pairs."
    ),

    # Launch preconditions
    'ELEVATION_REQUIRED': (
        "Administrator privileges required for '{command}'."
    ),
    'SECONDARY_OS_UNAVAILABLE': (
        "The {distro} environment is not available. Please run 'prakasa-env install' first."
    ),
    'LAUNCH_FAILED': (
        "'{command}' exited with code {exit_code}."
    ),

    # Component results
    'STEP_FAILED': "Failed at step '{step}': {command}",
    'COMMAND_TIMEOUT': "'{command}' timed out after {timeout} seconds",
    'MANUAL_ACTION': "{message}. This prerequisite cannot be installed automatically.",
    'ORCHESTRATOR_EXCEPTION': "{operation} raised {error_type}: {error}",
    'REQUIRES_SECONDARY_OS': (
        "Requires the {distro} environment, which is not available yet"
    ),
    'REQUIRES_ELEVATION': "Administrator privileges are required to install {component}",

    # Internal
    'INTERNAL_ERROR': (
        "An internal error occurred: {error}\n"
        "Please report this issue with the full command and log output."
    ),

    # Run summaries
    'REBOOT_REQUIRED': (
        "SYSTEM REBOOT REQUIRED\n"
        "Some components have been installed but require a system restart to take effect.\n"
        "Please restart your computer and run 'prakasa-env install' again to continue."
    ),
    'CHECK_NEXT_STEPS': (
        "Next steps:\n"
        "  1. You can now run distributed inference tasks:\n"
        "     prakasa-env run\n"
        "  2. Use 'prakasa-env --help' to see all available commands"
    ),
    'CHECK_NEXT_STEPS_WARNING': (
        "Next steps:\n"
        "  1. You can run tasks (environment is ready):\n"
        "     prakasa-env run\n"
        "  2. Consider running 'prakasa-env install' to update components"
    ),
    'INSTALL_NEXT_STEPS': (
        "Your system is now ready.\n"
        "Next steps:\n"
        "  1. Run 'prakasa-env check' to verify the installation\n"
        "  2. Start the inference server: prakasa-env run"
    ),
    'INSTALL_FAILED': (
        "Some components failed to install.\n"
        "Please check the error messages above and try again. You may need to:\n"
        "  1. Run as Administrator\n"
        "  2. Check your internet connection\n"
        "  3. Enable virtualization in BIOS"
    ),
}


def format_error(error_key: str, **kwargs) -> str:
    """
    Format a message template with the given parameters.

    Args:
        error_key: Key for the message template.
        **kwargs: Parameters to substitute in the template.

    Returns:
        Formatted message string.

    Example:
        >>> format_error('STEP_FAILED', step='clone_prakasa', command='git clone ...')
        "Failed at step 'clone_prakasa': git clone ..."
    """
    template = ERROR_MESSAGES.get(error_key)
    if template is None:
        return f"Unknown error: {error_key}\nContext: {kwargs}"

    try:
        return template.format(**kwargs)
    except KeyError as e:
        return f"{template}\n(Missing format parameter: {e})"


def get_error_template(error_key: str) -> Optional[str]:
    """Get the raw template for a given key, or None if not found."""
    return ERROR_MESSAGES.get(error_key)
