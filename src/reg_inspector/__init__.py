"""
reg-inspector: search, flag and watch tool for the Windows registry

Works against the live registry or a YAML snapshot of it.
"""

try:
    from importlib.metadata import version
    __version__ = version("reg-inspector")
except Exception:
    __version__ = "0.0.0"  # Fallback for development

__all__ = ["__version__"]
